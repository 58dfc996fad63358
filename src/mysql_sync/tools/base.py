"""Base class for the external MySQL command-line tools."""

import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional, Type

from ..core.endpoint import ConnectionDescriptor
from ..core.exceptions import ExternalToolError
from ..utils.logging import LoggerMixin


# How much of a failing tool's stderr is kept in the error message
STDERR_TAIL_CHARS = 2000


@dataclass
class ToolResult:
    """Outcome of one external tool run."""

    returncode: int
    stderr: str = ""
    duration: Optional[float] = None


def redact_arguments(arguments: List[str]) -> List[str]:
    """Mask password arguments before they are logged."""
    return [
        "--password=***" if argument.startswith("--password=") else argument
        for argument in arguments
    ]


class ExternalTool(LoggerMixin, ABC):
    """Runs one external executable synchronously with a timeout."""

    tool_name = "tool"
    error_class: Type[ExternalToolError] = ExternalToolError

    def __init__(self, executable_path: str, timeout: Optional[float] = None):
        """Initialize the tool.

        Args:
            executable_path: Absolute path to the executable
            timeout: Seconds to wait for the process, None waits forever
        """
        self.executable_path = executable_path
        self.timeout = timeout

    @abstractmethod
    def build_arguments(self, descriptor: ConnectionDescriptor) -> List[str]:
        """Build the command-line arguments for a connection descriptor."""
        pass

    def ensure_executable(self) -> None:
        if not self.executable_path or not Path(self.executable_path).is_file():
            raise self.error_class(f"{self.tool_name} executable not found: {self.executable_path}")

    def _run(
        self,
        arguments: List[str],
        stdin: Optional[IO[bytes]] = None,
        stdout: Optional[IO[bytes]] = None
    ) -> ToolResult:
        """Run the executable and wait for it to finish.

        Raises:
            ExternalToolError: The tool's error_class, on any failure
        """
        self.ensure_executable()

        command = [self.executable_path, *arguments]
        self.logger.info(
            "Running external tool",
            tool=self.tool_name,
            arguments=redact_arguments(arguments),
            timeout=self.timeout
        )

        start_time = time.time()
        try:
            completed = subprocess.run(
                command,
                stdin=stdin if stdin is not None else subprocess.DEVNULL,
                stdout=stdout if stdout is not None else subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False
            )
        except subprocess.TimeoutExpired as e:
            raise self.error_class(
                f"{self.tool_name} did not finish within {self.timeout} seconds",
                stderr=_decode(e.stderr)
            ) from e
        except OSError as e:
            raise self.error_class(f"Failed to start {self.tool_name}: {e}") from e

        duration = time.time() - start_time
        stderr = _decode(completed.stderr)

        if completed.returncode != 0:
            self.logger.error(
                "External tool failed",
                tool=self.tool_name,
                returncode=completed.returncode,
                stderr=stderr[-STDERR_TAIL_CHARS:]
            )
            raise self.error_class(
                f"{self.tool_name} exited with code {completed.returncode}: {stderr[-STDERR_TAIL_CHARS:].strip()}",
                returncode=completed.returncode,
                stderr=stderr
            )

        if stderr:
            self.logger.warning("External tool wrote to stderr", tool=self.tool_name, stderr=stderr[-STDERR_TAIL_CHARS:])

        self.logger.info("External tool finished", tool=self.tool_name, duration=f"{duration:.2f}s")
        return ToolResult(returncode=completed.returncode, stderr=stderr, duration=duration)


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")
