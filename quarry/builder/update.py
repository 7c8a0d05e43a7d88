"""UPDATE statement builder."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import Field

from ..types import QueryType
from .where import Where


class Update(Where):
    """Fluent UPDATE builder.

    Example:
        Update("users").set({"name": "alice", "age": 32}).where("id", "=", 1)
    """

    table_value: Any = None
    """Table name (stored to avoid shadowing the table() method)."""
    set_values: list[tuple[Any, Any]] = Field(default_factory=list)
    """(column, value) pairs; a later pair for the same column wins."""

    def __init__(self, table: Any = None, **data: Any):
        super().__init__(QueryType.UPDATE, "", **data)
        if table:
            self.table_value = table

    def table(self, table: Any) -> Update:
        self.table_value = table
        return self

    def set(self, pairs: Mapping[Any, Any]) -> Update:
        """Set several columns from a column -> value mapping."""
        for column, value in pairs.items():
            self.set_values.append((column, value))
        return self

    def value(self, column: Any, value: Any) -> Update:
        """Set a single column."""
        self.set_values.append((column, value))
        return self

    def compile(self, db: Any = None) -> str:
        from ..database import Database
        db = Database.resolve(db)

        query = "UPDATE " + db.quote_table(self.table_value)
        query += " SET " + self.compile_set(db, self.set_values)
        query += self._compile_where_tail(db)

        self.sql = query
        return self.sql

    def reset(self) -> Update:
        self.table_value = None
        self.set_values = []
        self._reset_where()
        return self
