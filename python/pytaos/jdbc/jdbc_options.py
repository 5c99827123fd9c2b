"""Connection property resolution for TDengine JDBC URLs.

Three layers feed the final configuration, merged in order:

1. built-in defaults derived from the running environment
2. fields found in the URL
3. caller-supplied overrides

Later layers win, with one exception: ``user`` and ``password`` given in the
URL query string beat the overrides.
"""

from __future__ import annotations

import enum
import locale
import logging
import sys
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Callable

from pytaos.jdbc.jdbc_url_parser import parse_jdbc_url
from pytaos.jdbc.utils import mask_credentials

logger = logging.getLogger("pytaos.jdbc")

PROPERTY_KEY_HOST = "host"
PROPERTY_KEY_PORT = "port"
PROPERTY_KEY_DBNAME = "dbname"
PROPERTY_KEY_USER = "user"
PROPERTY_KEY_PASSWORD = "password"
PROPERTY_KEY_CONFIG_DIR = "cfgdir"
PROPERTY_KEY_CHARSET = "charset"
PROPERTY_KEY_LOCALE = "locale"
PROPERTY_KEY_TIME_ZONE = "timezone"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = "6030"
DEFAULT_CONFIG_DIR = "C:\\TDengine\\cfg" if sys.platform.startswith("win") else "/etc/taos"

# Keys for which a URL value overrides the caller's value.
URL_PRECEDENCE_KEYS = frozenset({PROPERTY_KEY_USER, PROPERTY_KEY_PASSWORD})


@dataclass(frozen=True)
class RecognizedOption:
    """Static metadata for a connection property the driver understands."""

    name: str
    description: str
    required: bool = False
    default: str | None = None  # None: no default, or environment-derived


RECOGNIZED_OPTIONS: tuple[RecognizedOption, ...] = (
    RecognizedOption(PROPERTY_KEY_HOST, "Hostname", default=DEFAULT_HOST),
    RecognizedOption(PROPERTY_KEY_PORT, "Port", default=DEFAULT_PORT),
    RecognizedOption(PROPERTY_KEY_DBNAME, "Database name"),
    RecognizedOption(PROPERTY_KEY_USER, "User", required=True),
    RecognizedOption(PROPERTY_KEY_PASSWORD, "Password", required=True),
    RecognizedOption(PROPERTY_KEY_CONFIG_DIR, "Config directory", default=DEFAULT_CONFIG_DIR),
    RecognizedOption(PROPERTY_KEY_CHARSET, "Client-side character set"),
    RecognizedOption(PROPERTY_KEY_LOCALE, "Client-side locale"),
    RecognizedOption(PROPERTY_KEY_TIME_ZONE, "Client-side timezone"),
)

RECOGNIZED_KEYS = frozenset(option.name for option in RECOGNIZED_OPTIONS)
STATIC_DEFAULTS = MappingProxyType(
    {option.name: option.default for option in RECOGNIZED_OPTIONS if option.default is not None}
)


class Layer(enum.Enum):
    """Precedence layer a resolved value came from."""

    DEFAULTS = "defaults"
    URL = "url"
    OVERRIDES = "overrides"


@dataclass(frozen=True)
class PropertyInfo:
    """One row of the property listing returned by ``describe``."""

    name: str
    value: str | None
    required: bool
    description: str


class ResolvedConfig(Mapping[str, str]):
    """Immutable property mapping that remembers which layer set each key."""

    __slots__ = ("_values", "_sources")

    def __init__(self, values: Mapping[str, str], sources: Mapping[str, Layer]) -> None:
        self._values = dict(values)
        self._sources = {key: sources[key] for key in self._values}

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        shown = {key: ("***" if key == PROPERTY_KEY_PASSWORD else value) for key, value in self._values.items()}
        return f"ResolvedConfig({shown!r})"

    def source_of(self, key: str) -> Layer:
        """
        Return the layer that contributed ``key``.

        Raises:
            KeyError: If the key was not resolved
        """
        return self._sources[key]

    def extension_keys(self) -> frozenset[str]:
        """Keys outside the recognized option table."""
        return frozenset(self._values) - RECOGNIZED_KEYS

    def with_defaults(self, defaults: Mapping[str, str]) -> ResolvedConfig:
        """Return a copy with ``defaults`` filled in for keys not yet resolved."""
        values = dict(self._values)
        sources = dict(self._sources)
        for key, value in defaults.items():
            if key not in values:
                values[key] = value
                sources[key] = Layer.DEFAULTS
        return ResolvedConfig(values, sources)


def environment_defaults() -> dict[str, str]:
    """
    Derive charset, locale and time zone from the running process.

    Values the environment cannot supply are left out.

    Returns:
        Mapping of environment-derived defaults
    """
    values = {
        PROPERTY_KEY_CHARSET: locale.getpreferredencoding(False),
        PROPERTY_KEY_LOCALE: locale.setlocale(locale.LC_CTYPE),
        PROPERTY_KEY_TIME_ZONE: datetime.now().astimezone().tzname(),
    }
    return {key: value for key, value in values.items() if value}


def merge_layers(
    defaults: Mapping[str, str],
    url: Mapping[str, str],
    overrides: Mapping[str, str | None],
) -> ResolvedConfig:
    """
    Merge the three property layers into one configuration.

    Args:
        defaults: Built-in defaults (lowest precedence)
        url: Properties parsed from the URL
        overrides: Caller-supplied properties; ``None`` values are ignored

    Returns:
        ResolvedConfig recording the winning layer for every key
    """
    values: dict[str, str] = {}
    sources: dict[str, Layer] = {}
    for layer, props in ((Layer.DEFAULTS, defaults), (Layer.URL, url), (Layer.OVERRIDES, overrides)):
        for key, value in props.items():
            if value is None:
                continue
            if layer is Layer.OVERRIDES and key in URL_PRECEDENCE_KEYS and sources.get(key) is Layer.URL:
                continue
            values[key] = value
            sources[key] = layer
    return ResolvedConfig(values, sources)


class ConfigResolver:
    """Turn a TDengine JDBC URL plus overrides into a ResolvedConfig."""

    def __init__(self, defaults_factory: Callable[[], Mapping[str, str]] = environment_defaults) -> None:
        self._defaults_factory = defaults_factory

    def parse(self, candidate: str | None, overrides: Mapping[str, str] | None = None) -> ResolvedConfig:
        """
        Parse ``candidate`` and merge it with defaults and ``overrides``.

        A URL that is not a TDengine URL yields the overrides unchanged.

        Args:
            candidate: JDBC URL
            overrides: Caller-supplied properties

        Returns:
            Freshly built ResolvedConfig
        """
        overrides = overrides or {}
        parsed = parse_jdbc_url(candidate)
        if parsed is None:
            logger.debug("Not a TDengine URL, returning overrides unchanged")
            return merge_layers({}, {}, overrides)

        resolved = merge_layers(self._defaults_factory(), parsed.as_properties(), overrides)
        logger.debug(
            "Resolved %s keys from %s",
            len(resolved),
            mask_credentials(candidate),
        )
        return resolved

    def describe(self, candidate: str | None, overrides: Mapping[str, str] | None = None) -> tuple[PropertyInfo, ...]:
        """
        List every recognized option with its resolved or default value.

        Args:
            candidate: JDBC URL
            overrides: Caller-supplied properties

        Returns:
            One PropertyInfo per recognized option, in table order
        """
        resolved = self.parse(candidate, overrides)
        defaults = {**STATIC_DEFAULTS, **self._defaults_factory()}
        return tuple(
            PropertyInfo(
                name=option.name,
                value=resolved.get(option.name, defaults.get(option.name)),
                required=option.required,
                description=option.description,
            )
            for option in RECOGNIZED_OPTIONS
        )
