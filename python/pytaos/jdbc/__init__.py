"""TDengine JDBC-style URL parsing and connection property resolution.

This module understands connection URLs of the form
``jdbc:TAOS://[host][:port][/dbname][?key=value&...]`` (``TSDB`` is accepted
as an alternate spelling) and merges them with caller overrides into a single
configuration for a connection opener.

Usage:
    from pytaos.jdbc import TaosDriver

    driver = TaosDriver()
    config = driver.parse_url(
        "jdbc:TAOS://localhost:6030/log?user=root",
        {"password": "taosdata", "timezone": "UTC-8"},
    )
    config["host"]  # 'localhost'
    config["port"]  # '6030', ports stay text

    for info in driver.get_property_info("jdbc:TAOS://localhost:6030/log"):
        print(info.name, info.value, info.required, info.description)
"""

import logging

from pytaos.jdbc.driver import TaosDriver
from pytaos.jdbc.exceptions import (
    BackendNotAvailableError,
    ConnectionOpenError,
    InvalidArgumentError,
    TaosJDBCError,
)
from pytaos.jdbc.jdbc_options import ConfigResolver, Layer, PropertyInfo, ResolvedConfig
from pytaos.jdbc.jdbc_url_parser import accepts_url, parse_jdbc_url

__all__ = [
    "TaosJDBCError",
    "InvalidArgumentError",
    "BackendNotAvailableError",
    "ConnectionOpenError",
    "ConfigResolver",
    "Layer",
    "PropertyInfo",
    "ResolvedConfig",
    "TaosDriver",
    "accepts_url",
    "parse_jdbc_url",
]

# Set up logging for driver operations
logger = logging.getLogger("pytaos.jdbc")
logger.setLevel(logging.INFO)

# Add console handler if not already added
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
