"""Endpoint discovery from the TDengine client configuration directory.

When a URL names neither host nor port, the native client falls back to the
``firstEp``/``secondEp`` entries of ``taos.cfg``. This module reads those
entries so the resolved configuration can carry them explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pytaos.jdbc.jdbc_options import DEFAULT_CONFIG_DIR

logger = logging.getLogger("pytaos.jdbc")

CONFIG_FILE_NAME = "taos.cfg"
ENDPOINT_KEYS = ("firstep", "secondep")


@dataclass(frozen=True)
class Endpoint:
    """A ``host[:port]`` entry from taos.cfg."""

    host: str
    port: str | None = None

    @classmethod
    def from_text(cls, text: str) -> Endpoint | None:
        host, sep, port = text.strip().partition(":")
        if not host:
            return None
        return cls(host=host, port=port if sep and port else None)


def find_config_file(config_dir: str | Path | None = None) -> Path | None:
    """
    Locate taos.cfg (file name matched case-insensitively).

    Args:
        config_dir: Directory to search; defaults to the platform config directory

    Returns:
        Path to the file, or None if the directory or file is missing
    """
    directory = Path(config_dir or DEFAULT_CONFIG_DIR)
    try:
        candidates = sorted(directory.iterdir())
    except OSError as err:
        logger.warning("Cannot read config directory %s: %s", directory, err)
        return None

    for candidate in candidates:
        if candidate.name.lower() == CONFIG_FILE_NAME and candidate.is_file():
            return candidate
    logger.debug("No %s found in %s", CONFIG_FILE_NAME, directory)
    return None


def load_endpoints(config_file: Path) -> list[Endpoint]:
    """
    Read firstEp/secondEp entries, firstEp first.

    Args:
        config_file: Path to taos.cfg

    Returns:
        Endpoints in precedence order (may be empty)
    """
    found: dict[str, Endpoint] = {}
    try:
        lines = config_file.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as err:
        logger.warning("Cannot read %s: %s", config_file, err)
        return []

    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        parts = stripped.split(None, 1)
        key = parts[0].lower()
        if key not in ENDPOINT_KEYS or key in found or len(parts) < 2:
            continue
        endpoint = Endpoint.from_text(parts[1])
        if endpoint is not None:
            found[key] = endpoint

    return [found[key] for key in ENDPOINT_KEYS if key in found]


def resolve_endpoint(config_dir: str | Path | None = None) -> Endpoint | None:
    """
    Return the first endpoint configured in taos.cfg, if any.

    Args:
        config_dir: Directory holding taos.cfg; defaults to the platform config directory
    """
    config_file = find_config_file(config_dir)
    if config_file is None:
        return None
    endpoints = load_endpoints(config_file)
    if not endpoints:
        logger.debug("No endpoints configured in %s", config_file)
        return None
    return endpoints[0]
