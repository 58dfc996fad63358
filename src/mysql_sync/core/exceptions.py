"""Errors raised while planning or running a transfer.

Every error here is fatal: nothing is retried and the transfer is aborted
where it stands.
"""

from typing import Optional


class TransferError(Exception):
    """Base class for all transfer failures."""
    pass


class EndpointValidationError(TransferError):
    """Raised when a source or destination path or connection is unreachable."""
    pass


class DatabaseConnectionError(EndpointValidationError):
    """Raised when a connection to a MySQL endpoint cannot be opened."""
    pass


class ParseError(TransferError):
    """Raised when a connection string is malformed or incomplete."""
    pass


class ExternalToolError(TransferError):
    """Raised when an external MySQL tool cannot run or exits non-zero."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class DumpError(ExternalToolError):
    """Raised when mysqldump fails."""
    pass


class ApplyError(ExternalToolError):
    """Raised when applying a script with the mysql client fails."""
    pass
