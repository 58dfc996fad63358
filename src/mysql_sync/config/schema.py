"""Configuration schema definitions for provider settings and transfer jobs."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .settings import validate_executable_path


def _validate_timeout(value: Any) -> float:
    timeout = float(value)
    if timeout <= 0:
        raise ValueError(f"{value} is not a positive number of seconds")
    return timeout


@dataclass(frozen=True)
class ProviderSettingInfo:
    """A named provider setting as exposed to callers and config files."""

    name: str
    field: str
    description: str
    value_type: type = str
    validate: Optional[Callable[[Any], Any]] = None

    @property
    def friendly_name(self) -> str:
        return self.name

    def coerce(self, value: Any) -> Any:
        """Validate a raw value and return what should be stored.

        Raises:
            ValueError: If the value is rejected
        """
        if self.validate is not None:
            return self.validate(value)
        return self.value_type(value)


SUPPORTED_SETTINGS = (
    ProviderSettingInfo(
        name="mysqlDumpExecutablePath",
        field="mysqldump_path",
        description="Full physical path to mysqldump",
        validate=validate_executable_path,
    ),
    ProviderSettingInfo(
        name="mysqlExecutablePath",
        field="mysql_client_path",
        description="Full physical path to the mysql command-line client",
        validate=validate_executable_path,
    ),
    ProviderSettingInfo(
        name="processTimeoutSeconds",
        field="process_timeout_seconds",
        description="Seconds to wait for mysqldump or mysql before giving up",
        value_type=float,
        validate=_validate_timeout,
    ),
)


def find_setting(name: str) -> Optional[ProviderSettingInfo]:
    """Look up a supported setting by name, ignoring case."""
    for setting in SUPPORTED_SETTINGS:
        if setting.name.lower() == name.lower():
            return setting
    return None


class TransferJobConfig(BaseModel):
    """Configuration for a single source-to-destination transfer."""

    name: str = Field(..., description="Human-readable name for the transfer")
    source: str = Field(..., description="Absolute script path or connection string")
    destination: str = Field(..., description="Absolute script path or connection string")
    what_if: bool = Field(default=False, description="Plan the transfer without running it")
    is_active: bool = Field(default=True, description="Whether this transfer should run")
    description: Optional[str] = Field(None, description="Optional description")

    @field_validator("source", "destination")
    @classmethod
    def validate_endpoint_path(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Endpoint path must not be empty")
        return v


class TransferConfig(BaseModel):
    """Root configuration for a batch of transfers."""

    version: str = Field(default="1.0.0", description="Configuration version")
    created_at: datetime = Field(default_factory=datetime.now)

    # Logging configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Logging format (json, console)")

    # Provider settings keyed by their public names, e.g. mysqlDumpExecutablePath
    settings: Dict[str, Any] = Field(default_factory=dict)

    transfers: List[TransferJobConfig] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        if v.lower() not in ("json", "console"):
            raise ValueError("Log format must be 'json' or 'console'")
        return v.lower()

    def get_active_transfers(self) -> List[TransferJobConfig]:
        """Get all transfers that should run."""
        return [job for job in self.transfers if job.is_active]
