"""TDengine JDBC-style driver facade.

Ties URL acceptance, property resolution and the connection opener together
the way a driver manager expects to call them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pytaos.jdbc.backends import get_opener
from pytaos.jdbc.config_dir import resolve_endpoint
from pytaos.jdbc.jdbc_options import (
    PROPERTY_KEY_CONFIG_DIR,
    PROPERTY_KEY_HOST,
    PROPERTY_KEY_PORT,
    ConfigResolver,
    PropertyInfo,
    ResolvedConfig,
)
from pytaos.jdbc.jdbc_url_parser import accepts_url
from pytaos.jdbc.utils import mask_credentials

if TYPE_CHECKING:
    from collections.abc import Mapping

    from pytaos.jdbc.backends.base import ConnectionOpener

logger = logging.getLogger("pytaos.jdbc")


class TaosDriver:
    """
    Driver entry point for ``jdbc:TAOS://`` and ``jdbc:TSDB://`` URLs.

    Usage:
        driver = TaosDriver()
        if driver.accepts_url(url):
            session = driver.connect(url, {"user": "root", "password": "taosdata"})
    """

    major_version = 2
    minor_version = 0

    def __init__(
        self,
        opener: ConnectionOpener | None = None,
        resolver: ConfigResolver | None = None,
    ) -> None:
        self._opener = opener
        self._resolver = resolver or ConfigResolver()

    def accepts_url(self, url: str | None) -> bool:
        """
        Check whether this driver handles ``url``.

        Raises:
            InvalidArgumentError: If url is None
        """
        return accepts_url(url)

    def parse_url(self, url: str | None, overrides: Mapping[str, str] | None = None) -> ResolvedConfig:
        """Resolve ``url`` and ``overrides`` into one configuration."""
        return self._resolver.parse(url, overrides)

    def get_property_info(
        self,
        url: str | None,
        overrides: Mapping[str, str] | None = None,
    ) -> tuple[PropertyInfo, ...]:
        """List the recognized connection properties with their current values."""
        return self._resolver.describe(url, overrides)

    def jdbc_compliant(self) -> bool:
        """The driver does not implement the full relational client API."""
        return False

    def resolve(self, url: str, overrides: Mapping[str, str] | None = None) -> ResolvedConfig:
        """
        Resolve the configuration a connection attempt will use.

        Same as ``parse_url``, plus the taos.cfg endpoint when the URL and
        overrides name neither host nor port.

        Args:
            url: Accepted JDBC URL
            overrides: Caller-supplied properties

        Returns:
            ResolvedConfig ready for a ConnectionOpener
        """
        config = self._resolver.parse(url, overrides)
        if PROPERTY_KEY_HOST in config or PROPERTY_KEY_PORT in config:
            return config

        endpoint = resolve_endpoint(config.get(PROPERTY_KEY_CONFIG_DIR))
        if endpoint is None:
            return config

        logger.info("Using endpoint %s from taos.cfg", endpoint.host)
        defaults = {PROPERTY_KEY_HOST: endpoint.host}
        if endpoint.port is not None:
            defaults[PROPERTY_KEY_PORT] = endpoint.port
        return config.with_defaults(defaults)

    def connect(self, url: str | None, overrides: Mapping[str, str] | None = None) -> Any:
        """
        Open a session for ``url``.

        Args:
            url: JDBC URL
            overrides: Caller-supplied properties

        Returns:
            Session handle from the opener, or None if the URL belongs to another driver

        Raises:
            InvalidArgumentError: If url is None
            BackendNotAvailableError: If no opener is installed
            ConnectionOpenError: If the opener fails
        """
        if not self.accepts_url(url):
            return None

        config = self.resolve(url, overrides)
        if self._opener is None:
            self._opener = get_opener()

        logger.info("Connecting to %s with %s opener", mask_credentials(url), self._opener.get_name())
        return self._opener.open(config)
