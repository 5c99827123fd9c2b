"""REST (taosAdapter) connection opener backed by taospy's taosrest module."""

from __future__ import annotations

import importlib.util
import logging
from typing import TYPE_CHECKING, Any

from pytaos.jdbc.backends.base import ConnectionOpener
from pytaos.jdbc.backends.native import parse_port
from pytaos.jdbc.exceptions import BackendNotAvailableError, ConnectionOpenError
from pytaos.jdbc.jdbc_options import (
    DEFAULT_HOST,
    PROPERTY_KEY_DBNAME,
    PROPERTY_KEY_HOST,
    PROPERTY_KEY_PASSWORD,
    PROPERTY_KEY_TIME_ZONE,
    PROPERTY_KEY_USER,
)
from pytaos.jdbc.utils import mask_credentials

if TYPE_CHECKING:
    from pytaos.jdbc.jdbc_options import ResolvedConfig

logger = logging.getLogger("pytaos.jdbc")

DEFAULT_REST_PORT = 6041


class RestOpener(ConnectionOpener):
    """
    Opener talking HTTP to taosAdapter.

    The resolved ``port`` is used as the adapter port. When this opener stands
    in for the native one, ``adapter_port`` is set so the native port (6030)
    is not sent to taosAdapter.
    """

    def __init__(self, adapter_port: int | None = None) -> None:
        """Import taosrest lazily and expose it on the instance."""
        self.adapter_port = adapter_port
        try:
            import taosrest
        except ImportError as err:  # pragma: no cover - optional dependency
            message = "REST opener requires taospy. " "Install with: pip install taospy"
            raise BackendNotAvailableError(message) from err

        self.taosrest = taosrest

    def build_url(self, config: ResolvedConfig) -> str:
        """Build the taosAdapter base URL from host and port."""
        host = config.get(PROPERTY_KEY_HOST, DEFAULT_HOST)
        port = self.adapter_port or parse_port(config) or DEFAULT_REST_PORT
        return f"http://{host}:{port}"

    def open(self, config: ResolvedConfig) -> Any:
        """Open a REST session."""
        url = self.build_url(config)
        kwargs: dict[str, Any] = {"url": url}
        for key, arg in (
            (PROPERTY_KEY_USER, "user"),
            (PROPERTY_KEY_PASSWORD, "password"),
            (PROPERTY_KEY_DBNAME, "database"),
            (PROPERTY_KEY_TIME_ZONE, "timezone"),
        ):
            if key in config:
                kwargs[arg] = config[key]

        logger.info("Opening REST session to %s", mask_credentials(url))
        try:
            return self.taosrest.connect(**kwargs)
        except self.taosrest.Error as err:
            logger.exception("REST opener error")
            message = f"REST opener error: {err}"
            raise ConnectionOpenError(message) from err

    def get_name(self) -> str:
        """Get opener name."""
        return "REST"

    def is_available(self) -> bool:
        """Check if taosrest is available."""
        return importlib.util.find_spec("taosrest") is not None
