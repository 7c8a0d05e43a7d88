"""DELETE statement builder."""

from __future__ import annotations

from typing import Any

from ..types import QueryType
from .where import Where


class Delete(Where):
    """Fluent DELETE builder: ``Delete("users").where("id", "=", 1)``."""

    table_value: Any = None
    """Table name (stored to avoid shadowing the table() method)."""

    def __init__(self, table: Any = None, **data: Any):
        super().__init__(QueryType.DELETE, "", **data)
        if table:
            self.table_value = table

    def table(self, table: Any) -> Delete:
        self.table_value = table
        return self

    def compile(self, db: Any = None) -> str:
        from ..database import Database
        db = Database.resolve(db)
        self.sql = "DELETE FROM " + db.quote_table(self.table_value) + self._compile_where_tail(db)
        return self.sql

    def reset(self) -> Delete:
        self.table_value = None
        self._reset_where()
        return self
