"""Configuration loader for JSON/YAML files and environment variables."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from .schema import TransferConfig, find_setting
from .settings import ProviderSettings
from ..utils.logging import get_logger


class ConfigurationError(Exception):
    """Raised when configuration loading fails."""
    pass


class ConfigLoader:
    """Loads and validates configuration from various sources."""

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def load_from_file(self, file_path: Union[str, Path]) -> TransferConfig:
        """Load configuration from JSON or YAML file.

        Args:
            file_path: Path to configuration file

        Returns:
            Validated TransferConfig object

        Raises:
            ConfigurationError: If file cannot be loaded or validated
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix not in ('.yaml', '.yml', '.json'):
            raise ConfigurationError(f"Unsupported file format: {file_path.suffix}")

        self.logger.info("Loading configuration from file", file_path=str(file_path))

        try:
            # Parse based on file extension
            with open(file_path, 'r', encoding='utf-8') as f:
                if suffix == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML format: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON format: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {file_path}")

        return self.load_from_dict(data)

    def load_from_dict(self, data: Dict[str, Any]) -> TransferConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration data as dictionary

        Returns:
            Validated TransferConfig object
        """
        # Apply environment variable overrides
        data = self._apply_env_overrides(data)

        try:
            # Validate and create config object
            config = TransferConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        self.logger.info(
            "Configuration loaded",
            transfers_count=len(config.transfers),
            settings=sorted(config.settings)
        )

        return config

    def build_provider_settings(
        self,
        config: Union[TransferConfig, Mapping[str, Any]],
        base: Optional[ProviderSettings] = None
    ) -> ProviderSettings:
        """Apply named provider settings on top of a base ProviderSettings.

        Args:
            config: A TransferConfig or a mapping of setting name to value
            base: Settings to start from (defaults to environment settings)

        Raises:
            ConfigurationError: If a setting is unknown or its value is rejected
        """
        values = config.settings if isinstance(config, TransferConfig) else config
        updates: Dict[str, Any] = {}

        for name, raw_value in values.items():
            setting = find_setting(name)
            if setting is None:
                raise ConfigurationError(f"Unknown provider setting: {name}")
            try:
                updates[setting.field] = setting.coerce(raw_value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid value for {setting.name}: {e}") from e

        # Start from environment settings unless a base is given
        base = base or ProviderSettings()
        if updates:
            self.logger.info("Applied provider settings", settings=sorted(values))
        return base.model_copy(update=updates)

    def _apply_env_overrides(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration data.

        Environment variables use the format: MYSQL_SYNC_LOG_<KEY>
        """
        env_overrides = {}

        if os.getenv('MYSQL_SYNC_LOG_LEVEL'):
            env_overrides['log_level'] = os.getenv('MYSQL_SYNC_LOG_LEVEL')

        if os.getenv('MYSQL_SYNC_LOG_FORMAT'):
            env_overrides['log_format'] = os.getenv('MYSQL_SYNC_LOG_FORMAT')

        if env_overrides:
            self.logger.info("Applied environment variable overrides", overrides=list(env_overrides.keys()))
            data = {**data, **env_overrides}

        return data


def load_config_from_env() -> Optional[TransferConfig]:
    """Load configuration from environment variables and default files.

    Looks for configuration files in this order:
    1. MYSQL_SYNC_CONFIG_FILE environment variable
    2. ./mysql-sync.yaml, ./mysql-sync.yml, ./mysql-sync.json
    3. ./config/mysql-sync.yaml, ./config/mysql-sync.yml, ./config/mysql-sync.json

    Returns None if no file is found.
    """
    loader = ConfigLoader()
    logger = get_logger("load_config_from_env")

    # Check for explicit config file
    config_file = os.getenv('MYSQL_SYNC_CONFIG_FILE')
    if config_file:
        if os.path.exists(config_file):
            return loader.load_from_file(config_file)
        logger.warning("Specified config file not found", file=config_file)

    # Check default locations
    possible_files = [
        './mysql-sync.yaml',
        './mysql-sync.yml',
        './mysql-sync.json',
        './config/mysql-sync.yaml',
        './config/mysql-sync.yml',
        './config/mysql-sync.json'
    ]

    for file_path in possible_files:
        if os.path.exists(file_path):
            logger.info("Found configuration file", file=file_path)
            return loader.load_from_file(file_path)

    logger.info("No configuration file found")
    return None
