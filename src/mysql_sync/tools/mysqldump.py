"""mysqldump wrapper."""

from pathlib import Path
from typing import List, Union

from .base import ExternalTool, ToolResult
from ..core.endpoint import ConnectionDescriptor
from ..core.exceptions import DumpError


def build_dump_arguments(descriptor: ConnectionDescriptor) -> List[str]:
    """Build mysqldump arguments for a descriptor.

    ``--port`` is only added when the connection string carried one.
    """
    arguments = [f"--host={descriptor.server}"]
    if descriptor.port is not None:
        arguments.append(f"--port={descriptor.port}")
    arguments.extend([
        descriptor.database,
        f"--user={descriptor.uid}",
        f"--password={descriptor.pwd}",
        "--no-create-db",
    ])
    return arguments


class MySqlDumpTool(ExternalTool):
    """Exports a database to SQL text with mysqldump."""

    tool_name = "mysqldump"
    error_class = DumpError

    def build_arguments(self, descriptor: ConnectionDescriptor) -> List[str]:
        return build_dump_arguments(descriptor)

    def dump(self, descriptor: ConnectionDescriptor, output_path: Union[str, Path]) -> ToolResult:
        """Append a dump of the described database to output_path.

        Raises:
            DumpError: If mysqldump is missing, times out or exits non-zero
        """
        self.logger.info("Dumping database", database=descriptor.redacted(), output=str(output_path))

        with open(output_path, "ab") as output:
            return self._run(self.build_arguments(descriptor), stdout=output)
