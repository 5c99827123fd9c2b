"""Custom exceptions for the TDengine JDBC URL module."""


class TaosJDBCError(Exception):
    """Base exception for TDengine JDBC driver errors."""


class InvalidArgumentError(TaosJDBCError, ValueError):
    """Raised when a required argument is missing (e.g. a ``None`` URL)."""


class BackendNotAvailableError(TaosJDBCError):
    """Raised when the requested connection opener is not installed."""


class ConnectionOpenError(TaosJDBCError):
    """Raised when a connection opener fails to establish a session."""
