"""Core transfer logic package."""

from .endpoint import (
    ConnectionDescriptor,
    DatabaseEndpoint,
    Endpoint,
    EndpointKind,
    FileEndpoint,
    classify,
    is_absolute_physical_path,
    parse_connection_string
)
from .exceptions import (
    ApplyError,
    DatabaseConnectionError,
    DumpError,
    EndpointValidationError,
    ExternalToolError,
    ParseError,
    TransferError
)
from .transfer import TransferKind, TransferOrchestrator, TransferRequest, TransferResult
from .provider import MySqlProvider, describe_provider

__all__ = [
    "ConnectionDescriptor",
    "DatabaseEndpoint",
    "Endpoint",
    "EndpointKind",
    "FileEndpoint",
    "classify",
    "is_absolute_physical_path",
    "parse_connection_string",

    "ApplyError",
    "DatabaseConnectionError",
    "DumpError",
    "EndpointValidationError",
    "ExternalToolError",
    "ParseError",
    "TransferError",

    "TransferKind",
    "TransferOrchestrator",
    "TransferRequest",
    "TransferResult",

    "MySqlProvider",
    "describe_provider"
]
