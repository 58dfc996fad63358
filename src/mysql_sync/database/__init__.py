"""Database connectivity package."""

from .database import (
    DRIVER_NAME,
    build_database_url,
    validate_connection
)

__all__ = [
    "DRIVER_NAME",
    "build_database_url",
    "validate_connection"
]
