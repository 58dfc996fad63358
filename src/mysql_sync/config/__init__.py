"""Configuration package for mysql-sync."""

from .settings import (
    AppSettings,
    LoggingSettings,
    ProviderSettings,
    get_settings,
    reset_settings
)

from .schema import (
    ProviderSettingInfo,
    SUPPORTED_SETTINGS,
    TransferConfig,
    TransferJobConfig,
    find_setting
)

from .loader import (
    ConfigLoader,
    ConfigurationError,
    load_config_from_env
)

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "ProviderSettings",
    "get_settings",
    "reset_settings",

    "ProviderSettingInfo",
    "SUPPORTED_SETTINGS",
    "TransferConfig",
    "TransferJobConfig",
    "find_setting",

    "ConfigLoader",
    "ConfigurationError",
    "load_config_from_env"
]
