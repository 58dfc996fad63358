"""Endpoint classification and connection string parsing.

A sync endpoint is either an absolute path to a SQL script or a MySQL
connection string such as ``server=localhost;database=db1;uid=root;pwd=secret``.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .exceptions import ParseError


PATH_SEPARATORS = ("\\", "/")

REQUIRED_KEYS = ("server", "database", "uid", "pwd")

# Historical key spellings accepted in connection strings
KEY_ALIASES = {
    "user id": "uid",
    "password": "pwd",
}


class EndpointKind(str, Enum):
    """What an endpoint path refers to."""
    SCRIPT = "script"
    DATABASE = "database"


def _is_separator(char: str) -> bool:
    return char in PATH_SEPARATORS


def is_absolute_physical_path(path: Optional[str]) -> bool:
    """Tell whether a path is an absolute filesystem path.

    Accepts drive paths (``C:\\dump.sql``) and share paths
    (``\\\\server\\share\\dump.sql``). On POSIX hosts a leading ``/`` also
    counts.
    """
    if not path or len(path) < 3:
        return False
    if path[0].isalpha() and path[1] == ":" and _is_separator(path[2]):
        return True
    if _is_separator(path[0]) and _is_separator(path[1]):
        return True
    if os.name == "posix" and path[0] == "/":
        return True
    return False


def parse_connection_string(connection_string: str) -> Dict[str, str]:
    """Split a connection string into lower-cased key/value pairs.

    Raises:
        ParseError: On an entry without ``=``, an empty key or a repeated key
    """
    items: Dict[str, str] = {}

    for entry in connection_string.split(";"):
        if not entry.strip():
            continue

        key, separator, value = entry.partition("=")
        if not separator:
            raise ParseError(f"Malformed connection string entry (missing '='): {key.strip()!r}")

        key = key.strip().lower()
        if not key:
            raise ParseError("Malformed connection string entry (empty key)")
        key = KEY_ALIASES.get(key, key)

        if key in items:
            raise ParseError(f"Duplicate connection string key: {key}")
        items[key] = value.strip()

    return items


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Resolved MySQL connection parameters."""

    server: str
    database: str
    uid: str
    pwd: str = field(repr=False)
    port: Optional[int] = None
    options: Dict[str, str] = field(default_factory=dict, hash=False)

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "ConnectionDescriptor":
        """Parse and check a connection string.

        Raises:
            ParseError: If the string is malformed or lacks a required key
        """
        items = parse_connection_string(connection_string)

        missing = [key for key in REQUIRED_KEYS if key not in items]
        if missing:
            raise ParseError(f"Connection string is missing required keys: {', '.join(missing)}")

        port = None
        if "port" in items:
            try:
                port = int(items["port"])
            except ValueError as e:
                raise ParseError(f"Invalid port in connection string: {items['port']!r}") from e

        options = {
            key: value for key, value in items.items()
            if key not in REQUIRED_KEYS and key != "port"
        }

        return cls(
            server=items["server"],
            database=items["database"],
            uid=items["uid"],
            pwd=items["pwd"],
            port=port,
            options=options
        )

    def redacted(self) -> str:
        """Render the descriptor for logs and error messages."""
        parts = [f"server={self.server}"]
        if self.port is not None:
            parts.append(f"port={self.port}")
        parts.extend([f"database={self.database}", f"uid={self.uid}", "pwd=***"])
        return ";".join(parts)


@dataclass(frozen=True)
class Endpoint:
    """A sync participant, identified by its raw path string."""

    path: str

    kind = EndpointKind.SCRIPT

    @property
    def is_script(self) -> bool:
        return self.kind == EndpointKind.SCRIPT

    @property
    def is_database(self) -> bool:
        return self.kind == EndpointKind.DATABASE

    def display_name(self) -> str:
        return self.path


@dataclass(frozen=True)
class FileEndpoint(Endpoint):
    """A SQL script on disk."""

    kind = EndpointKind.SCRIPT


@dataclass(frozen=True)
class DatabaseEndpoint(Endpoint):
    """A live MySQL database. The connection string is parsed on first use."""

    kind = EndpointKind.DATABASE

    @property
    def descriptor(self) -> ConnectionDescriptor:
        return ConnectionDescriptor.from_connection_string(self.path)

    def display_name(self) -> str:
        try:
            return self.descriptor.redacted()
        except ParseError:
            return "<unparseable connection string>"


def classify(path: str) -> Endpoint:
    """Classify a raw endpoint path. Never raises for malformed connection strings."""
    if is_absolute_physical_path(path):
        return FileEndpoint(path)
    return DatabaseEndpoint(path)
