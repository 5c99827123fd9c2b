"""TDengine JDBC URL acceptance and field extraction.

Acceptance is a cheap prefix check so a driver registry can discard foreign
URLs quickly. Extraction never fails: every missing or ill-formed fragment
simply leaves its field absent.

    jdbc:<TAOS|TSDB>://[host][:port][/dbname][?key=value[&key=value]...]
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from pytaos.jdbc.exceptions import InvalidArgumentError

logger = logging.getLogger("pytaos.jdbc")

SUBPROTOCOLS = ("TAOS", "TSDB")
URL_PREFIXES = tuple(f"jdbc:{token}://" for token in SUBPROTOCOLS)

_PREFIX_RE = re.compile(r"jdbc:(taos|tsdb)://", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedJDBCUrl:
    """Fields extracted from a TDengine JDBC URL (absent fields are ``None``)."""

    subprotocol: str  # e.g. 'TAOS', as spelled in the URL
    host: str | None = None
    port: str | None = None  # kept as text, never converted
    dbname: str | None = None
    params: dict[str, str] = field(default_factory=dict)

    def as_properties(self) -> dict[str, str]:
        """
        Flatten into a property mapping.

        Query parameters go in first; host, port and dbname found in the
        URL body replace query parameters of the same name.

        Returns:
            Mapping of every field the URL supplied
        """
        props = dict(self.params)
        if self.dbname is not None:
            props["dbname"] = self.dbname
        if self.port is not None:
            props["port"] = self.port
        if self.host is not None:
            props["host"] = self.host
        return props


def accepts_url(candidate: str | None) -> bool:
    """
    Check whether ``candidate`` is a TDengine JDBC URL.

    Examples:
    - jdbc:TAOS://localhost:6030/db → True
    - JDBC:tsdb://:/ → True
    - jdbc:postgresql://localhost/db → False

    Args:
        candidate: URL string to check

    Returns:
        True if the string starts with a recognized ``jdbc:<token>://`` prefix

    Raises:
        InvalidArgumentError: If candidate is None
    """
    if candidate is None:
        msg = "JDBC URL must not be None"
        raise InvalidArgumentError(msg)
    return _PREFIX_RE.match(candidate) is not None


def parse_jdbc_url(candidate: str | None) -> ParsedJDBCUrl | None:
    """
    Extract host, port, dbname and query parameters from a TDengine URL.

    Examples:
    - jdbc:TAOS://127.0.0.1:0/db?user=root → host='127.0.0.1', port='0', dbname='db', params={'user': 'root'}
    - jdbc:TAOS://:/ → host, port and dbname all None
    - jdbc:TAOS://h?k=a=b → params={'k': 'a=b'}

    Args:
        candidate: URL string; need not have been accepted beforehand

    Returns:
        ParsedJDBCUrl, or None if the string is not a TDengine URL
    """
    if candidate is None:
        return None
    match = _PREFIX_RE.match(candidate)
    if not match:
        return None

    rest = candidate[match.end() :]

    params: dict[str, str] = {}
    rest, sep, query = rest.partition("?")
    if sep:
        params = parse_query_params(query)

    dbname = None
    rest, sep, path = rest.partition("/")
    if sep and path:
        dbname = path

    port = None
    host_part, sep, port_part = rest.partition(":")
    if sep and port_part:
        port = port_part

    host = host_part if host_part.strip() else None

    parsed = ParsedJDBCUrl(
        subprotocol=match.group(1),
        host=host,
        port=port,
        dbname=dbname,
        params=params,
    )
    logger.debug(
        "Parsed %s URL: host=%s port=%s dbname=%s params=%s",
        parsed.subprotocol,
        host,
        port,
        dbname,
        sorted(params),
    )
    return parsed


def parse_query_params(query: str) -> dict[str, str]:
    """
    Split a ``k1=v1&k2=v2`` query string.

    Each pair is split at its first ``=``. Pairs without ``=``, with an empty
    key or with an empty value are skipped. Later pairs replace earlier ones.

    Args:
        query: Text after the ``?`` of the URL

    Returns:
        Mapping of query keys to values, keys kept verbatim
    """
    params: dict[str, str] = {}
    for pair in query.split("&"):
        key, sep, value = pair.partition("=")
        if not sep or not key or not value:
            continue
        params[key] = value
    return params
