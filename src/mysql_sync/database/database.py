"""MySQL connection checks."""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL
from sqlalchemy.pool import NullPool

from ..core.endpoint import ConnectionDescriptor
from ..core.exceptions import DatabaseConnectionError
from ..utils.logging import get_logger


logger = get_logger("database")

DRIVER_NAME = "mysql+pymysql"


def build_database_url(descriptor: ConnectionDescriptor) -> URL:
    """Build a SQLAlchemy URL for a connection descriptor."""
    return URL.create(
        DRIVER_NAME,
        username=descriptor.uid,
        password=descriptor.pwd,
        host=descriptor.server,
        port=descriptor.port,
        database=descriptor.database
    )


def validate_connection(descriptor: ConnectionDescriptor, connect_timeout: int = 10) -> None:
    """Open and immediately close a connection to the described database.

    Raises:
        DatabaseConnectionError: If the connection cannot be opened
    """
    engine = create_engine(
        build_database_url(descriptor),
        poolclass=NullPool,
        connect_args={"connect_timeout": connect_timeout}
    )
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("Database connection test successful", database=descriptor.redacted())
    except Exception as e:
        logger.error("Database connection test failed", database=descriptor.redacted(), error=str(e))
        raise DatabaseConnectionError(f"Could not access {descriptor.redacted()}") from e
    finally:
        engine.dispose()
