"""Shortcuts creating queries, builders and expressions.

    from quarry import db

    db.select("id", "name").from_("users").where("id", "=", 5).execute()
    db.insert("users", ["name"]).values(["alice"]).execute()
    db.query(QueryType.SELECT, "SELECT 1").execute()
"""

from typing import Any, Iterable, Optional

from .builder import Delete, Insert, Select, Update
from .expression import Expression
from .query import Query
from .types import QueryType


def query(query_type: QueryType, sql: str) -> Query:
    """Create a raw SQL query."""
    return Query(query_type, sql)


def select(*columns: Any) -> Select:
    """Create a SELECT; no columns means ``SELECT *``."""
    return Select(*columns)


def select_array(columns: Optional[Iterable[Any]] = None) -> Select:
    return Select(*(columns or ()))


def insert(table: Any = None, columns: Optional[Iterable[Any]] = None) -> Insert:
    return Insert(table, columns)


def update(table: Any = None) -> Update:
    return Update(table)


def delete(table: Any = None) -> Delete:
    return Delete(table)


def expr(sql: str, parameters: Optional[dict[str, Any]] = None) -> Expression:
    """Create an unescaped SQL fragment, e.g. ``expr("COUNT(*)")``."""
    return Expression(sql, parameters)
