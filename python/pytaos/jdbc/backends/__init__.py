"""Connection openers for TDengine sessions.

Available openers:
- Native: taosc client library through taospy's ``taos`` module
- REST: taosAdapter over HTTP through taospy's ``taosrest`` module
"""

import logging

from pytaos.jdbc.backends.base import ConnectionOpener
from pytaos.jdbc.backends.native import NativeOpener
from pytaos.jdbc.backends.rest import DEFAULT_REST_PORT, RestOpener
from pytaos.jdbc.exceptions import BackendNotAvailableError

logger = logging.getLogger("pytaos.jdbc")

__all__ = [
    "ConnectionOpener",
    "NativeOpener",
    "RestOpener",
    "get_opener",
]


def get_opener(engine: str = "native", *, auto_fallback: bool = True) -> ConnectionOpener:
    """
    Get opener instance by name with automatic fallback.

    Args:
        engine: Opener name ('native' or 'rest')
        auto_fallback: If True, fall back to the other opener when the requested one is missing

    Returns:
        ConnectionOpener instance

    Raises:
        BackendNotAvailableError: If no opener is available
        ValueError: If engine name is invalid
    """
    opener_order = {
        "native": [NativeOpener, RestOpener],
        "rest": [RestOpener, NativeOpener],
    }

    engine = engine.lower()
    if engine not in opener_order:
        message = f"Invalid engine: {engine}. Must be one of: native, rest"
        raise ValueError(message)

    openers_to_try = opener_order[engine] if auto_fallback else opener_order[engine][:1]

    for opener_class in openers_to_try:
        try:
            opener = opener_class()
        except BackendNotAvailableError:
            continue
        if opener.is_available():
            if engine == "native" and isinstance(opener, RestOpener):
                opener.adapter_port = DEFAULT_REST_PORT
            if opener_class is not openers_to_try[0]:
                logger.warning(
                    "Requested opener '%s' not available, using '%s' instead",
                    engine,
                    opener.get_name(),
                )
            return opener

    attempted = ", ".join(opener.__name__ for opener in openers_to_try)
    message = f"No TDengine connection opener available. Tried: {attempted}. Install with: pip install taospy"
    raise BackendNotAvailableError(message)
