"""The ``dbFullMySql`` object provider.

A provider wraps one endpoint path. As a source it hands out a content
stream (the script itself, or a fresh dump of the database); as a
destination it takes another provider or a raw stream and applies it.
"""

import os
import tempfile
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Tuple

from .endpoint import Endpoint, classify
from .transfer import (
    TEMP_SCRIPT_PREFIX,
    TEMP_SCRIPT_SUFFIX,
    TransferOrchestrator,
    TransferRequest,
    TransferResult,
)
from ..config.schema import SUPPORTED_SETTINGS
from ..config.settings import ProviderSettings
from ..utils.logging import get_logger


PROVIDER_NAME = "dbFullMySql"
KEY_ATTRIBUTE_NAME = "path"
PROVIDER_DESCRIPTION = "Syncs MySQL databases and SQL script files"
EXAMPLE_PATH = "Server=localhost;Database=db1;uid=root;pwd=secret"


def describe_provider() -> Dict[str, Any]:
    """Describe the provider and the settings it accepts."""
    return {
        "name": PROVIDER_NAME,
        "description": PROVIDER_DESCRIPTION,
        "example_path": EXAMPLE_PATH,
        "key_attribute": KEY_ATTRIBUTE_NAME,
        "settings": [
            {
                "name": setting.name,
                "friendly_name": setting.friendly_name,
                "description": setting.description,
                "type": setting.value_type.__name__,
            }
            for setting in SUPPORTED_SETTINGS
        ],
    }


class MySqlProvider:
    """Object provider for one MySQL database or SQL script endpoint."""

    name = PROVIDER_NAME

    def __init__(
        self,
        path: str,
        orchestrator: Optional[TransferOrchestrator] = None,
        settings: Optional[ProviderSettings] = None
    ):
        self.path = path
        self.orchestrator = orchestrator or TransferOrchestrator(settings)
        self.logger = get_logger(self.__class__.__name__)
        self._owned_scripts: List[Path] = []

    def __enter__(self) -> "MySqlProvider":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def endpoint(self) -> Endpoint:
        return classify(self.path)

    def key_attribute(self) -> Tuple[str, str]:
        return KEY_ATTRIBUTE_NAME, self.path

    def get_attributes(self) -> None:
        """Check that this endpoint can be read from.

        Raises:
            EndpointValidationError: If the file or database is not accessible
            ParseError: If the connection string is malformed
        """
        self.orchestrator.validate_endpoint(self.endpoint, "source")

    def get_stream(self) -> BinaryIO:
        """Open the endpoint's content for reading.

        Databases are dumped into a temporary script that lives until close().
        """
        endpoint = self.endpoint
        if endpoint.is_script:
            return open(endpoint.path, "rb")

        fd, name = tempfile.mkstemp(
            prefix=TEMP_SCRIPT_PREFIX,
            suffix=TEMP_SCRIPT_SUFFIX,
            dir=self.orchestrator.temp_dir
        )
        os.close(fd)
        script_path = Path(name)
        self._owned_scripts.append(script_path)

        self.orchestrator.dump(endpoint.descriptor, script_path)
        return open(script_path, "rb")

    def add(self, source: "MySqlProvider", what_if: bool = False) -> TransferResult:
        """Sync a source provider's content into this endpoint."""
        return self.orchestrator.transfer(TransferRequest(source.path, self.path, dry_run=what_if))

    def update(self, source: "MySqlProvider", what_if: bool = False) -> TransferResult:
        return self.add(source, what_if)

    def add_stream(self, stream: BinaryIO, what_if: bool = False) -> TransferResult:
        """Sync script content from a stream, e.g. an archive entry, into this endpoint."""
        return self.orchestrator.transfer_from_stream(stream, self.path, dry_run=what_if)

    def close(self) -> None:
        """Delete the temporary scripts created by get_stream()."""
        while self._owned_scripts:
            script_path = self._owned_scripts.pop()
            try:
                script_path.unlink()
            except FileNotFoundError:
                pass
            else:
                self.logger.debug("Removed temporary script", script=str(script_path))
