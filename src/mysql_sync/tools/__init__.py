"""External MySQL tool wrappers."""

from .base import ExternalTool, ToolResult, redact_arguments
from .mysqldump import MySqlDumpTool, build_dump_arguments
from .mysql_client import MySqlClientTool, build_client_arguments

__all__ = [
    "ExternalTool",
    "ToolResult",
    "redact_arguments",

    "MySqlDumpTool",
    "build_dump_arguments",
    "MySqlClientTool",
    "build_client_arguments"
]
