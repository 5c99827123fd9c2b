"""Native (taosc) connection opener backed by taospy."""

from __future__ import annotations

import importlib.util
import logging
from typing import TYPE_CHECKING, Any

from pytaos.jdbc.backends.base import ConnectionOpener
from pytaos.jdbc.exceptions import BackendNotAvailableError, ConnectionOpenError
from pytaos.jdbc.jdbc_options import (
    PROPERTY_KEY_CONFIG_DIR,
    PROPERTY_KEY_DBNAME,
    PROPERTY_KEY_HOST,
    PROPERTY_KEY_PASSWORD,
    PROPERTY_KEY_PORT,
    PROPERTY_KEY_TIME_ZONE,
    PROPERTY_KEY_USER,
)

if TYPE_CHECKING:
    from pytaos.jdbc.jdbc_options import ResolvedConfig

logger = logging.getLogger("pytaos.jdbc")


def parse_port(config: ResolvedConfig) -> int | None:
    """
    Convert the textual port of a configuration to an integer.

    Raises:
        ConnectionOpenError: If the port is not a number
    """
    port = config.get(PROPERTY_KEY_PORT)
    if port is None:
        return None
    try:
        return int(port)
    except ValueError as err:
        message = f"port must be an integer, got: {port}"
        raise ConnectionOpenError(message) from err


class NativeOpener(ConnectionOpener):
    """Opener using the taospy native client (``taos`` module)."""

    def __init__(self) -> None:
        """Import taos lazily and expose it on the instance."""
        try:
            import taos
        except ImportError as err:  # pragma: no cover - optional dependency
            message = "Native opener requires taospy. " "Install with: pip install taospy"
            raise BackendNotAvailableError(message) from err
        except Exception as err:
            # taos raises InterfaceError at import time when libtaos cannot be loaded
            message = f"Native opener cannot load the TDengine client library: {err}"
            raise BackendNotAvailableError(message) from err

        self.taos = taos

    def open(self, config: ResolvedConfig) -> Any:
        """Open a native session."""
        kwargs: dict[str, Any] = {}
        for key, arg in (
            (PROPERTY_KEY_HOST, "host"),
            (PROPERTY_KEY_USER, "user"),
            (PROPERTY_KEY_PASSWORD, "password"),
            (PROPERTY_KEY_DBNAME, "database"),
            (PROPERTY_KEY_CONFIG_DIR, "config"),
            (PROPERTY_KEY_TIME_ZONE, "timezone"),
        ):
            if key in config:
                kwargs[arg] = config[key]
        port = parse_port(config)
        if port is not None:
            kwargs["port"] = port

        logger.info(
            "Opening native session to %s:%s",
            kwargs.get("host", "<default>"),
            kwargs.get("port", "<default>"),
        )
        try:
            return self.taos.connect(**kwargs)
        except self.taos.Error as err:
            logger.exception("Native opener error")
            message = f"Native opener error: {err}"
            raise ConnectionOpenError(message) from err

    def get_name(self) -> str:
        """Get opener name."""
        return "Native"

    def is_available(self) -> bool:
        """Check if taospy is available."""
        return importlib.util.find_spec("taos") is not None
