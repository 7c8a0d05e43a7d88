"""Quarry: SQL query builder and database abstraction on DB-API drivers."""

from .types import InsertResult, ParamType, QueryType
from .exceptions import (
    BuilderError,
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    ParameterError,
    QuarryError,
    ReadOnlyResultError,
    TransactionError,
)
from .config import DatabaseConfig, configure, load_config_file
from .database import Database
from .expression import Expression
from .query import Query
from .result import CachedResult, CursorResult, Result
from .builder import Delete, Insert, Select, Update
from .transaction import transaction
from . import db

__all__ = [
    "BuilderError",
    "CachedResult",
    "ConfigurationError",
    "CursorResult",
    "Database",
    "DatabaseConfig",
    "DatabaseConnectionError",
    "DatabaseError",
    "Delete",
    "Expression",
    "Insert",
    "InsertResult",
    "ParamType",
    "ParameterError",
    "QuarryError",
    "Query",
    "QueryType",
    "ReadOnlyResultError",
    "Result",
    "Select",
    "TransactionError",
    "Update",
    "configure",
    "db",
    "load_config_file",
    "transaction",
]
