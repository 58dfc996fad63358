"""mysql command-line client wrapper, used in batch mode to apply scripts."""

from pathlib import Path
from typing import List, Union

from .base import ExternalTool, ToolResult
from ..core.endpoint import ConnectionDescriptor
from ..core.exceptions import ApplyError


def build_client_arguments(descriptor: ConnectionDescriptor) -> List[str]:
    arguments = [f"--host={descriptor.server}"]
    if descriptor.port is not None:
        arguments.append(f"--port={descriptor.port}")
    arguments.extend([
        f"--user={descriptor.uid}",
        f"--password={descriptor.pwd}",
        "--batch",
        descriptor.database,
    ])
    return arguments


class MySqlClientTool(ExternalTool):
    """Applies SQL scripts to a database through the mysql client."""

    tool_name = "mysql"
    error_class = ApplyError

    def build_arguments(self, descriptor: ConnectionDescriptor) -> List[str]:
        return build_client_arguments(descriptor)

    def apply(self, script_path: Union[str, Path], descriptor: ConnectionDescriptor) -> ToolResult:
        """Run a script against the described database, fed through stdin.

        Raises:
            ApplyError: If the script cannot be read or mysql fails
        """
        self.logger.info("Applying script", script=str(script_path), database=descriptor.redacted())

        try:
            script = open(script_path, "rb")
        except OSError as e:
            raise ApplyError(f"Cannot read script {script_path}: {e}") from e

        with script:
            return self._run(self.build_arguments(descriptor), stdin=script)
