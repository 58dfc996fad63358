"""Application configuration settings."""

import os
import shutil
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Install location of mysqldump.exe relative to %ProgramFiles%
WINDOWS_MYSQL_BIN = Path("MySQL") / "MySQL Server 5.1" / "bin"


def _default_tool_path(tool: str) -> str:
    """Resolve the default location of a MySQL client tool."""
    if os.name == "nt":
        program_files = os.environ.get("ProgramFiles", r"C:\Program Files")
        return str(Path(program_files) / WINDOWS_MYSQL_BIN / f"{tool}.exe")
    return shutil.which(tool) or f"/usr/bin/{tool}"


def default_mysqldump_path() -> str:
    return _default_tool_path("mysqldump")


def default_mysql_client_path() -> str:
    return _default_tool_path("mysql")


def validate_executable_path(value: str) -> str:
    """Check that an explicitly configured tool path is usable.

    Raises:
        ValueError: If the path is relative or does not exist
    """
    if not value or not Path(value).is_absolute():
        raise ValueError(f"{value} is not a valid absolute physical path")
    if not Path(value).exists():
        raise ValueError(f"{value} does not exist")
    return value


class ProviderSettings(BaseSettings):
    """Settings handed to the transfer orchestrator.

    Tool paths are only validated when supplied explicitly; the platform
    defaults are checked when a tool is first launched.
    """

    model_config = SettingsConfigDict(env_prefix="MYSQL_SYNC_", extra="ignore", validate_default=False)

    mysqldump_path: str = Field(default_factory=default_mysqldump_path)
    mysql_client_path: str = Field(default_factory=default_mysql_client_path)
    temp_dir: Optional[str] = None
    process_timeout_seconds: float = 1800.0
    verify_connections: bool = True
    connect_timeout_seconds: int = 10

    @field_validator("mysqldump_path", "mysql_client_path")
    @classmethod
    def validate_tool_path(cls, v):
        return validate_executable_path(v)

    @field_validator("process_timeout_seconds")
    @classmethod
    def validate_process_timeout(cls, v):
        if v <= 0:
            raise ValueError("Process timeout must be positive")
        return v

    @field_validator("connect_timeout_seconds")
    @classmethod
    def validate_connect_timeout(cls, v):
        if v < 1:
            raise ValueError("Connect timeout must be at least 1 second")
        return v

    @field_validator("temp_dir")
    @classmethod
    def validate_temp_dir(cls, v):
        if v is not None and not Path(v).is_dir():
            raise ValueError(f"Temporary directory {v} does not exist")
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="MYSQL_SYNC_LOG_", extra="ignore")

    level: str = "INFO"
    format: str = "console"
    file_path: Optional[str] = None


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="MYSQL_SYNC_APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    name: str = "mysql-sync"
    version: str = "1.0.0"

    # Sub-settings
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get application settings."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
