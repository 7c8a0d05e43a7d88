"""Exception types raised by quarry.

Callers can tell "the API was used wrong" (`BuilderError`, `ParameterError`,
`ReadOnlyResultError`, `ConfigurationError`) apart from "the database rejected
the statement" (`DatabaseError` and `DatabaseConnectionError`).
"""

from typing import Optional


class QuarryError(Exception):
    """Base class for every error raised by quarry."""
    pass


class ConfigurationError(QuarryError, ValueError):
    """Missing or invalid database instance configuration."""
    pass


class DatabaseError(QuarryError):
    """Normalized native driver error.

    Every exception raised by an underlying DB-API module is converted into
    this type at the driver boundary, carrying the native message and code
    along with the SQL text that failed (when there is one).
    """

    def __init__(self, message: str, sql: Optional[str] = None, code: Optional[int] = None):
        self.message = message
        self.sql = sql
        self.code = code
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.sql is None:
            return self.message
        return f"{self.message} [ {self.sql} ]"


class DatabaseConnectionError(DatabaseError):
    """The native connection could not be established."""
    pass


class BuilderError(QuarryError, ValueError):
    """Invalid use of the fluent query builder API."""
    pass


class ParameterError(QuarryError, ValueError):
    """Invalid query parameter key or placeholder binding."""
    pass


class ReadOnlyResultError(QuarryError, TypeError):
    """Database results cannot be modified."""
    pass


class TransactionError(QuarryError):
    """Custom exception for transaction-related errors"""
    pass
