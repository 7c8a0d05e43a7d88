"""INSERT statement builder."""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from pydantic import Field

from ..exceptions import BuilderError
from ..query import Query
from ..types import QueryType
from .base import QueryBuilder


class Insert(QueryBuilder):
    """Fluent INSERT builder, with rows of values or a SELECT sub-query.

    Examples:
        Insert("users", ["name", "age"]).values(["alice", 31], ["bob", 27])
        Insert("archive", ["id", "name"]).select(Select("id", "name").from_("users"))
    """

    table_value: Any = None
    """Table name (stored to avoid shadowing the table() method)."""
    column_names: list[Any] = Field(default_factory=list)
    value_rows: Any = Field(default_factory=list)
    """List of value rows, or the SELECT query providing them."""

    def __init__(self, table: Any = None, columns: Optional[Iterable[Any]] = None, **data: Any):
        super().__init__(QueryType.INSERT, "", **data)
        if table:
            self.table_value = table
        if columns:
            self.column_names = list(columns)

    def table(self, table: Any) -> Insert:
        self.table_value = table
        return self

    def columns(self, columns: Iterable[Any]) -> Insert:
        self.column_names = list(columns)
        return self

    def values(self, *rows: Sequence[Any]) -> Insert:
        """Add rows of values, in the order of the columns."""
        if not isinstance(self.value_rows, list):
            raise BuilderError("INSERT INTO ... SELECT statements cannot be combined with INSERT INTO ... VALUES")
        self.value_rows.extend(list(row) for row in rows)
        return self

    def select(self, query: Query) -> Insert:
        """Use the rows returned by a SELECT query."""
        if not isinstance(query, Query) or query.query_type != QueryType.SELECT:
            raise BuilderError("Only SELECT queries can be combined with INSERT queries")
        if isinstance(self.value_rows, list) and self.value_rows:
            raise BuilderError("INSERT INTO ... SELECT statements cannot be combined with INSERT INTO ... VALUES")
        self.value_rows = query
        return self

    def compile(self, db: Any = None) -> str:
        from ..database import Database
        db = Database.resolve(db)

        query = "INSERT INTO " + db.quote_table(self.table_value)
        query += " (" + ", ".join(db.quote_column(column) for column in self.column_names) + ") "
        if isinstance(self.value_rows, list):
            groups = []
            for row in self.value_rows:
                quoted = [value if self._is_parameter(value) else db.quote(value) for value in row]
                groups.append("(" + ", ".join(quoted) + ")")
            query += "VALUES " + ", ".join(groups)
        else:
            query += self.value_rows.compile(db)

        self.sql = query
        return self.sql

    def reset(self) -> Insert:
        self.table_value = None
        self.column_names = []
        self.value_rows = []
        self._clear_query()
        return self
