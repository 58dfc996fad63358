"""Tests for the dbFullMySql object provider."""

import io
import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mysql_sync.config.settings import ProviderSettings
from mysql_sync.core.exceptions import EndpointValidationError, ParseError
from mysql_sync.core.provider import MySqlProvider, describe_provider
from mysql_sync.core.transfer import TransferKind, TransferOrchestrator, TransferRequest


SOURCE_DB = "server=src;database=app;uid=u;pwd=p"


class TestDescribeProvider:
    """Test the provider description."""

    def test_description(self):
        description = describe_provider()

        assert description["name"] == "dbFullMySql"
        assert description["key_attribute"] == "path"
        assert description["example_path"] == "Server=localhost;Database=db1;uid=root;pwd=secret"

    def test_dump_path_setting_is_advertised(self):
        settings = {setting["name"]: setting for setting in describe_provider()["settings"]}

        assert "mysqlDumpExecutablePath" in settings
        assert settings["mysqlDumpExecutablePath"]["friendly_name"] == "mysqlDumpExecutablePath"
        assert settings["processTimeoutSeconds"]["type"] == "float"


class TestMySqlProvider:
    """Test provider operations."""

    @pytest.fixture(autouse=True)
    def setup_provider(self, tmp_path):
        self.tmp_path = tmp_path
        self.temp_dir = tmp_path / "temp"
        self.temp_dir.mkdir()
        self.dump_tool = MagicMock()
        self.dump_tool.dump.side_effect = self.fake_dump
        self.client_tool = MagicMock()
        self.orchestrator = TransferOrchestrator(
            ProviderSettings(temp_dir=str(self.temp_dir), verify_connections=False),
            dump_tool=self.dump_tool,
            client_tool=self.client_tool
        )

    @staticmethod
    def fake_dump(descriptor, output_path):
        with open(output_path, "ab") as output:
            output.write(f"-- dump of {descriptor.database}\n".encode())

    def test_key_attribute(self):
        provider = MySqlProvider(SOURCE_DB, orchestrator=self.orchestrator)
        assert provider.key_attribute() == ("path", SOURCE_DB)
        assert provider.endpoint.is_database

    def test_get_attributes_checks_script(self):
        provider = MySqlProvider(str(self.tmp_path / "missing.sql"), orchestrator=self.orchestrator)

        with pytest.raises(EndpointValidationError):
            provider.get_attributes()

    def test_get_attributes_parses_connection_string(self):
        provider = MySqlProvider("server=src", orchestrator=self.orchestrator)

        with pytest.raises(ParseError):
            provider.get_attributes()

    def test_get_stream_of_script(self):
        script = self.tmp_path / "in.sql"
        script.write_bytes(b"SELECT 1;\n")

        with MySqlProvider(str(script), orchestrator=self.orchestrator) as provider:
            with provider.get_stream() as stream:
                assert stream.read() == b"SELECT 1;\n"

        self.dump_tool.dump.assert_not_called()

    def test_get_stream_of_database_dumps_until_close(self):
        provider = MySqlProvider(SOURCE_DB, orchestrator=self.orchestrator)

        with provider.get_stream() as stream:
            assert stream.read() == b"-- dump of app\n"
        assert len(list(self.temp_dir.iterdir())) == 1

        provider.close()
        assert list(self.temp_dir.iterdir()) == []

    def test_add_runs_transfer(self):
        destination = self.tmp_path / "out.sql"
        source = MySqlProvider(SOURCE_DB, orchestrator=self.orchestrator)
        target = MySqlProvider(str(destination), orchestrator=self.orchestrator)

        result = target.add(source)

        assert result.kind == TransferKind.DATABASE_TO_SCRIPT
        assert destination.read_text() == "-- dump of app\n"

    def test_update_with_what_if(self):
        destination = self.tmp_path / "out.sql"
        source = MySqlProvider(SOURCE_DB, orchestrator=self.orchestrator)
        target = MySqlProvider(str(destination), orchestrator=self.orchestrator)

        result = target.update(source, what_if=True)

        assert result.dry_run is True
        assert not destination.exists()
        self.dump_tool.dump.assert_not_called()

    def test_add_delegates_request(self):
        orchestrator = MagicMock()
        target = MySqlProvider("C:\\out.sql", orchestrator=orchestrator)

        target.add(MySqlProvider(SOURCE_DB, orchestrator=orchestrator), what_if=True)

        orchestrator.transfer.assert_called_once_with(TransferRequest(SOURCE_DB, "C:\\out.sql", dry_run=True))

    def test_add_stream_applies_to_database(self):
        target = MySqlProvider("server=dst;database=app;uid=u;pwd=p", orchestrator=self.orchestrator)

        result = target.add_stream(io.BytesIO(b"SELECT 1;\n"))

        assert result.kind == TransferKind.SCRIPT_TO_DATABASE
        self.client_tool.apply.assert_called_once()
        script_path, descriptor = self.client_tool.apply.call_args.args
        assert Path(script_path).parent == self.temp_dir
        assert descriptor.server == "dst"
        assert list(self.temp_dir.iterdir()) == []
