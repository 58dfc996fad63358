"""
mysql-sync - sync MySQL databases and SQL script files.

An endpoint is either an absolute path to a SQL script or a MySQL connection
string (``server=host;database=db;uid=user;pwd=secret``). Databases are read
with mysqldump and written with the mysql command-line client.

Usage:
    mysql-sync "server=src;database=app;uid=u;pwd=p" /backups/app.sql
    mysql-sync /backups/app.sql "server=dst;database=app;uid=u;pwd=p"
    mysql-sync --config transfers.yaml
"""

__version__ = "1.0.0"

from .core import (
    ApplyError,
    ConnectionDescriptor,
    DatabaseConnectionError,
    DumpError,
    EndpointValidationError,
    MySqlProvider,
    ParseError,
    TransferError,
    TransferKind,
    TransferOrchestrator,
    TransferRequest,
    TransferResult,
    classify
)

__all__ = [
    "ApplyError",
    "ConnectionDescriptor",
    "DatabaseConnectionError",
    "DumpError",
    "EndpointValidationError",
    "MySqlProvider",
    "ParseError",
    "TransferError",
    "TransferKind",
    "TransferOrchestrator",
    "TransferRequest",
    "TransferResult",
    "classify",
]
