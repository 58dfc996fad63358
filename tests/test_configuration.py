"""Tests for the configuration management system."""

import sys
import os
import json
import yaml
from pathlib import Path

import pytest
from pydantic import ValidationError

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mysql_sync.config import (
    ConfigLoader,
    ConfigurationError,
    ProviderSettings,
    SUPPORTED_SETTINGS,
    TransferConfig,
    TransferJobConfig,
    find_setting,
    get_settings,
    load_config_from_env,
    reset_settings
)
from mysql_sync.config.settings import validate_executable_path


def create_test_config_data(dump_path):
    """Create test configuration data."""
    return {
        "version": "1.0.0",
        "log_level": "debug",
        "log_format": "json",
        "settings": {
            "mysqlDumpExecutablePath": str(dump_path),
            "processTimeoutSeconds": 60
        },
        "transfers": [
            {
                "name": "Nightly backup",
                "source": "server=db1;database=app;uid=backup;pwd=secret",
                "destination": "/backups/app.sql",
                "description": "Dump the app database"
            },
            {
                "name": "Restore staging",
                "source": "/backups/app.sql",
                "destination": "server=db2;database=app;uid=deploy;pwd=secret",
                "what_if": True,
                "is_active": False
            }
        ]
    }


@pytest.fixture
def fake_executable(tmp_path):
    path = tmp_path / "mysqldump"
    path.write_text("#!/bin/sh\n")
    return path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "MYSQL_SYNC_LOG_LEVEL",
        "MYSQL_SYNC_LOG_FORMAT",
        "MYSQL_SYNC_CONFIG_FILE",
        "MYSQL_SYNC_MYSQLDUMP_PATH",
        "MYSQL_SYNC_PROCESS_TIMEOUT_SECONDS",
        "MYSQL_SYNC_TEMP_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


class TestProviderSettings:
    """Test provider settings defaults and validation."""

    def test_defaults(self):
        settings = ProviderSettings()

        assert settings.mysqldump_path.endswith("mysqldump") or settings.mysqldump_path.endswith("mysqldump.exe")
        assert settings.process_timeout_seconds == 1800.0
        assert settings.verify_connections is True
        assert settings.temp_dir is None

    @pytest.mark.skipif(os.name != "posix", reason="POSIX default tool locations")
    def test_defaults_build_without_tools_installed(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PATH", str(tmp_path))

        settings = ProviderSettings(temp_dir=str(tmp_path), verify_connections=False)

        assert settings.mysqldump_path == "/usr/bin/mysqldump"
        assert settings.mysql_client_path == "/usr/bin/mysql"
        assert get_settings().provider.mysqldump_path == "/usr/bin/mysqldump"

    def test_explicit_tool_path_must_exist(self, tmp_path):
        with pytest.raises(ValidationError, match="does not exist"):
            ProviderSettings(mysqldump_path=str(tmp_path / "missing" / "mysqldump"))

    def test_explicit_tool_path_must_be_absolute(self):
        with pytest.raises(ValidationError, match="not a valid absolute physical path"):
            ProviderSettings(mysqldump_path="bin/mysqldump")

    def test_explicit_tool_path_accepted(self, fake_executable):
        settings = ProviderSettings(mysqldump_path=str(fake_executable))
        assert settings.mysqldump_path == str(fake_executable)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ProviderSettings(process_timeout_seconds=0)

    def test_temp_dir_must_exist(self, tmp_path):
        with pytest.raises(ValidationError):
            ProviderSettings(temp_dir=str(tmp_path / "nope"))
        assert ProviderSettings(temp_dir=str(tmp_path)).temp_dir == str(tmp_path)

    def test_environment_overrides(self, monkeypatch, fake_executable):
        monkeypatch.setenv("MYSQL_SYNC_MYSQLDUMP_PATH", str(fake_executable))
        monkeypatch.setenv("MYSQL_SYNC_PROCESS_TIMEOUT_SECONDS", "60")

        settings = get_settings().provider

        assert settings.mysqldump_path == str(fake_executable)
        assert settings.process_timeout_seconds == 60.0

    def test_settings_are_cached_until_reset(self, monkeypatch):
        first = get_settings()
        assert get_settings() is first

        reset_settings()
        assert get_settings() is not first


class TestSettingRegistry:
    """Test the named provider settings."""

    def test_dump_path_setting_is_registered(self):
        setting = find_setting("mysqlDumpExecutablePath")

        assert setting is not None
        assert setting.field == "mysqldump_path"
        assert setting.friendly_name == "mysqlDumpExecutablePath"
        assert "mysqldump" in setting.description

    def test_lookup_ignores_case(self):
        assert find_setting("MYSQLDUMPEXECUTABLEPATH") is find_setting("mysqlDumpExecutablePath")
        assert find_setting("unknownSetting") is None

    def test_all_names_unique(self):
        names = [setting.name.lower() for setting in SUPPORTED_SETTINGS]
        assert len(names) == len(set(names))

    def test_validate_executable_path(self, fake_executable):
        assert validate_executable_path(str(fake_executable)) == str(fake_executable)
        with pytest.raises(ValueError):
            validate_executable_path("")


class TestConfigLoader:
    """Test loading configuration files."""

    def setup_method(self):
        self.loader = ConfigLoader()

    def test_load_from_dict(self, fake_executable):
        config = self.loader.load_from_dict(create_test_config_data(fake_executable))

        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert len(config.transfers) == 2
        assert [job.name for job in config.get_active_transfers()] == ["Nightly backup"]

    def test_load_yaml_file(self, tmp_path, fake_executable):
        config_file = tmp_path / "mysql-sync.yaml"
        config_file.write_text(yaml.dump(create_test_config_data(fake_executable)))

        config = self.loader.load_from_file(config_file)

        assert config.settings["processTimeoutSeconds"] == 60
        assert config.transfers[1].what_if is True

    def test_load_json_file(self, tmp_path, fake_executable):
        config_file = tmp_path / "mysql-sync.json"
        config_file.write_text(json.dumps(create_test_config_data(fake_executable)))

        config = self.loader.load_from_file(str(config_file))

        assert config.transfers[0].source.startswith("server=db1")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            self.loader.load_from_file(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        config_file = tmp_path / "config.ini"
        config_file.write_text("[main]\n")

        with pytest.raises(ConfigurationError, match="Unsupported"):
            self.loader.load_from_file(config_file)

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("transfers: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            self.loader.load_from_file(config_file)

    def test_non_mapping_root(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("[1, 2, 3]")

        with pytest.raises(ConfigurationError, match="mapping"):
            self.loader.load_from_file(config_file)

    def test_invalid_log_level(self):
        with pytest.raises(ConfigurationError):
            self.loader.load_from_dict({"log_level": "LOUD"})

    def test_blank_endpoint_rejected(self):
        with pytest.raises(ValidationError):
            TransferJobConfig(name="blank", source="  ", destination="/tmp/x.sql")

    def test_env_overrides_log_settings(self, monkeypatch):
        monkeypatch.setenv("MYSQL_SYNC_LOG_LEVEL", "warning")
        monkeypatch.setenv("MYSQL_SYNC_LOG_FORMAT", "console")

        config = self.loader.load_from_dict({"log_level": "DEBUG", "log_format": "json"})

        assert config.log_level == "WARNING"
        assert config.log_format == "console"


class TestBuildProviderSettings:
    """Test applying named settings to provider settings."""

    def setup_method(self):
        self.loader = ConfigLoader()
        self.base = ProviderSettings()

    def test_applies_named_settings(self, fake_executable):
        config = TransferConfig(settings={
            "mysqlDumpExecutablePath": str(fake_executable),
            "processTimeoutSeconds": "120"
        })

        settings = self.loader.build_provider_settings(config, base=self.base)

        assert settings.mysqldump_path == str(fake_executable)
        assert settings.process_timeout_seconds == 120.0
        assert settings.mysql_client_path == self.base.mysql_client_path

    def test_base_is_not_modified(self, fake_executable):
        self.loader.build_provider_settings(
            {"mysqlDumpExecutablePath": str(fake_executable)},
            base=self.base
        )
        assert self.base.mysqldump_path != str(fake_executable)

    def test_no_settings_returns_equal_copy(self):
        settings = self.loader.build_provider_settings({}, base=self.base)
        assert settings == self.base

    def test_unknown_setting(self):
        with pytest.raises(ConfigurationError, match="Unknown provider setting: bogus"):
            self.loader.build_provider_settings({"bogus": "1"}, base=self.base)

    def test_relative_dump_path_rejected(self):
        with pytest.raises(ConfigurationError, match="not a valid absolute physical path"):
            self.loader.build_provider_settings({"mysqlDumpExecutablePath": "mysqldump"}, base=self.base)

    def test_missing_dump_path_rejected(self, tmp_path):
        missing = tmp_path / "mysqldump"
        with pytest.raises(ConfigurationError, match="does not exist"):
            self.loader.build_provider_settings({"mysqlDumpExecutablePath": str(missing)}, base=self.base)

    def test_bad_timeout_rejected(self):
        with pytest.raises(ConfigurationError, match="processTimeoutSeconds"):
            self.loader.build_provider_settings({"processTimeoutSeconds": "-5"}, base=self.base)
        with pytest.raises(ConfigurationError):
            self.loader.build_provider_settings({"processTimeoutSeconds": "soon"}, base=self.base)


class TestLoadConfigFromEnv:
    """Test config file discovery."""

    def test_explicit_config_file(self, monkeypatch, tmp_path, fake_executable):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(yaml.dump(create_test_config_data(fake_executable)))
        monkeypatch.setenv("MYSQL_SYNC_CONFIG_FILE", str(config_file))

        config = load_config_from_env()

        assert config is not None
        assert len(config.transfers) == 2

    def test_default_file_in_working_directory(self, monkeypatch, tmp_path):
        (tmp_path / "mysql-sync.json").write_text(json.dumps({"transfers": []}))
        monkeypatch.chdir(tmp_path)

        config = load_config_from_env()

        assert config is not None
        assert config.transfers == []

    def test_nothing_found(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert load_config_from_env() is None
