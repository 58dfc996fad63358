"""Transfer orchestration between SQL scripts and MySQL databases."""

import functools
import os
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional

from .endpoint import ConnectionDescriptor, DatabaseEndpoint, Endpoint, classify
from .exceptions import EndpointValidationError
from ..config.settings import ProviderSettings
from ..database import validate_connection
from ..tools import MySqlClientTool, MySqlDumpTool
from ..utils.logging import get_logger, log_execution_time


# Chunk size used when copying script content
COPY_BUFFER_SIZE = 32768

TEMP_SCRIPT_PREFIX = "mysql-sync-"
TEMP_SCRIPT_SUFFIX = ".sql"

ConnectionValidator = Callable[[ConnectionDescriptor], None]


class TransferKind(str, Enum):
    """The four ways content can move between endpoints."""
    SCRIPT_TO_DATABASE = "script_to_database"
    SCRIPT_TO_SCRIPT = "script_to_script"
    DATABASE_TO_SCRIPT = "database_to_script"
    DATABASE_TO_DATABASE = "database_to_database"

    @classmethod
    def for_endpoints(cls, source: Endpoint, destination: Endpoint) -> "TransferKind":
        if source.is_script:
            return cls.SCRIPT_TO_DATABASE if destination.is_database else cls.SCRIPT_TO_SCRIPT
        return cls.DATABASE_TO_DATABASE if destination.is_database else cls.DATABASE_TO_SCRIPT


@dataclass(frozen=True)
class TransferRequest:
    """One source-to-destination sync operation."""

    source: str
    destination: str
    dry_run: bool = False

    @property
    def source_endpoint(self) -> Endpoint:
        return classify(self.source)

    @property
    def destination_endpoint(self) -> Endpoint:
        return classify(self.destination)

    @property
    def kind(self) -> TransferKind:
        return TransferKind.for_endpoints(self.source_endpoint, self.destination_endpoint)


@dataclass
class TransferResult:
    """Result of a transfer."""

    kind: TransferKind
    success: bool
    dry_run: bool = False
    bytes_written: int = 0
    duration: Optional[float] = None


class TransferOrchestrator:
    """Selects and runs one of the four transfer paths for a request."""

    def __init__(
        self,
        settings: Optional[ProviderSettings] = None,
        dump_tool: Optional[MySqlDumpTool] = None,
        client_tool: Optional[MySqlClientTool] = None,
        connection_validator: Optional[ConnectionValidator] = None
    ):
        """Initialize the orchestrator.

        Args:
            settings: Tool paths, temp directory and timeouts
            dump_tool: Replaces the mysqldump wrapper built from settings
            client_tool: Replaces the mysql client wrapper built from settings
            connection_validator: Replaces the live connection check; ignored
                when settings.verify_connections is off
        """
        self.settings = settings or ProviderSettings()
        self.logger = get_logger(self.__class__.__name__)

        self.dump_tool = dump_tool or MySqlDumpTool(
            self.settings.mysqldump_path,
            timeout=self.settings.process_timeout_seconds
        )
        self.client_tool = client_tool or MySqlClientTool(
            self.settings.mysql_client_path,
            timeout=self.settings.process_timeout_seconds
        )

        if not self.settings.verify_connections:
            self.connection_validator = None
        elif connection_validator is not None:
            self.connection_validator = connection_validator
        else:
            self.connection_validator = functools.partial(
                validate_connection,
                connect_timeout=self.settings.connect_timeout_seconds
            )

    @property
    def temp_dir(self) -> str:
        return self.settings.temp_dir or tempfile.gettempdir()

    def plan(self, request: TransferRequest) -> TransferKind:
        return request.kind

    def validate_endpoint(self, endpoint: Endpoint, role: str = "source") -> None:
        """Check that an endpoint can take part in a transfer.

        Raises:
            ParseError: If a connection string is malformed
            EndpointValidationError: If a path or database is unreachable
        """
        if isinstance(endpoint, DatabaseEndpoint):
            descriptor = endpoint.descriptor
            if self.connection_validator is not None:
                self.connection_validator(descriptor)
            return

        path = Path(endpoint.path)
        if role == "source":
            if not path.is_file():
                raise EndpointValidationError(f"File {endpoint.path} is not accessible")
            return

        if path.exists():
            if not path.is_file() or not os.access(path, os.W_OK):
                raise EndpointValidationError(f"File {endpoint.path} is not writable")
        elif not path.parent.is_dir() or not os.access(path.parent, os.W_OK):
            raise EndpointValidationError(f"Directory for {endpoint.path} is not writable")

    def ensure_distinct_scripts(self, source_path: Path, destination_path: Path) -> None:
        """Refuse to append a script to itself.

        Raises:
            EndpointValidationError: If both paths resolve to the same file
        """
        if destination_path.exists() and os.path.samefile(source_path, destination_path):
            raise EndpointValidationError(
                f"Source and destination are the same file: {destination_path}"
            )

    @contextmanager
    def scoped_script(self) -> Iterator[Path]:
        """Yield a uniquely named temporary script, removed on every exit path."""
        fd, name = tempfile.mkstemp(
            prefix=TEMP_SCRIPT_PREFIX,
            suffix=TEMP_SCRIPT_SUFFIX,
            dir=self.temp_dir
        )
        os.close(fd)
        script_path = Path(name)
        try:
            yield script_path
        finally:
            try:
                script_path.unlink()
            except FileNotFoundError:
                pass

    def dump(self, descriptor: ConnectionDescriptor, script_path: Path) -> None:
        """Append a dump of the described database to script_path."""
        self.dump_tool.dump(descriptor, script_path)

    def apply_script_to_database(self, script_path: Path, descriptor: ConnectionDescriptor) -> None:
        self.client_tool.apply(script_path, descriptor)

    def append_script(self, source_path: Path, destination_path: Path) -> int:
        """Append one script to another.

        Returns:
            Number of bytes appended
        """
        self.ensure_distinct_scripts(source_path, destination_path)
        with open(source_path, "rb") as source, open(destination_path, "ab") as destination:
            return _copy_stream(source, destination)

    @log_execution_time
    def transfer(self, request: TransferRequest) -> TransferResult:
        """Run a transfer request.

        Both endpoints are validated before any work starts. Any failure
        aborts the transfer; the destination keeps whatever the failing step
        already wrote.

        Returns:
            TransferResult with the path taken and bytes appended to script
            destinations
        """
        kind = self.plan(request)
        source = request.source_endpoint
        destination = request.destination_endpoint

        self.logger.info(
            "Starting transfer",
            kind=kind.value,
            source=source.display_name(),
            destination=destination.display_name(),
            dry_run=request.dry_run
        )

        if request.dry_run:
            return TransferResult(kind=kind, success=True, dry_run=True)

        start_time = time.time()

        self.validate_endpoint(source, "source")
        self.validate_endpoint(destination, "destination")
        if kind == TransferKind.SCRIPT_TO_SCRIPT:
            self.ensure_distinct_scripts(Path(source.path), Path(destination.path))

        bytes_written = 0

        if kind == TransferKind.SCRIPT_TO_DATABASE:
            self.apply_script_to_database(Path(source.path), destination.descriptor)

        elif kind == TransferKind.SCRIPT_TO_SCRIPT:
            bytes_written = self.append_script(Path(source.path), Path(destination.path))

        elif kind == TransferKind.DATABASE_TO_SCRIPT:
            with self.scoped_script() as script_path:
                self.dump(source.descriptor, script_path)
                bytes_written = self.append_script(script_path, Path(destination.path))

        else:
            with self.scoped_script() as script_path:
                self.dump(source.descriptor, script_path)
                self.apply_script_to_database(script_path, destination.descriptor)

        duration = time.time() - start_time
        self.logger.info(
            "Transfer completed",
            kind=kind.value,
            bytes_written=bytes_written,
            duration=f"{duration:.2f}s"
        )

        return TransferResult(
            kind=kind,
            success=True,
            bytes_written=bytes_written,
            duration=duration
        )

    def transfer_from_stream(
        self,
        stream: BinaryIO,
        destination: str,
        dry_run: bool = False
    ) -> TransferResult:
        """Transfer script content read from a binary stream.

        The stream is copied into a temporary script which then acts as the
        transfer source.
        """
        destination_endpoint = classify(destination)
        if dry_run:
            kind = TransferKind.SCRIPT_TO_DATABASE if destination_endpoint.is_database else TransferKind.SCRIPT_TO_SCRIPT
            return TransferResult(kind=kind, success=True, dry_run=True)

        with self.scoped_script() as script_path:
            with open(script_path, "wb") as script:
                copied = _copy_stream(stream, script)
            self.logger.info("Copied stream to temporary script", bytes=copied)
            return self.transfer(TransferRequest(str(script_path), destination))


def _copy_stream(source: BinaryIO, destination: BinaryIO) -> int:
    copied = 0
    while True:
        chunk = source.read(COPY_BUFFER_SIZE)
        if not chunk:
            break
        destination.write(chunk)
        copied += len(chunk)
    return copied
