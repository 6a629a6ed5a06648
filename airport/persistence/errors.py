"""Persistence-specific exceptions."""


class PersistenceError(Exception):
    """Base exception for all persistence errors."""


class DatabaseNotReadyError(PersistenceError):
    """Raised when no database file has been configured or created yet."""
