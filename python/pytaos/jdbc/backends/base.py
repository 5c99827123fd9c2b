"""Abstract base class for connection openers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pytaos.jdbc.jdbc_options import ResolvedConfig


class ConnectionOpener(ABC):
    """Abstract interface for the transport that opens a TDengine session."""

    @abstractmethod
    def open(self, config: ResolvedConfig) -> Any:
        """
        Open a session using a resolved configuration.

        Args:
            config: Merged connection properties (host, port, dbname, user, ...)

        Returns:
            Live session handle owned by the caller

        Raises:
            ConnectionOpenError: If the session cannot be established
            BackendNotAvailableError: If the opener library is not installed
        """

    @abstractmethod
    def get_name(self) -> str:
        """
        Get opener name.

        Returns:
            Opener name (e.g., 'Native', 'REST')
        """

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if the opener is available (library installed).

        Returns:
            True if the opener can be used
        """
