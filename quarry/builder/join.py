"""JOIN clause of a SELECT."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from ..exceptions import BuilderError


class Join(BaseModel):
    """``[TYPE] JOIN table`` with either ON conditions or USING columns."""

    model_config = {"arbitrary_types_allowed": True}

    table: Any
    """Table name, ``(table, alias)`` pair, or sub-query."""
    join_type: Optional[str] = None
    """INNER, LEFT, RIGHT, ... (None for a plain JOIN)."""
    on_conditions: list[tuple[Any, Optional[str], Any]] = Field(default_factory=list)
    using_columns: list[Any] = Field(default_factory=list)

    def __init__(self, table: Any, join_type: Optional[str] = None, **data: Any):
        super().__init__(table=table, join_type=join_type, **data)

    def on(self, c1: Any, op: Optional[str], c2: Any) -> Join:
        """Add ``c1 op c2``; conditions are joined with AND."""
        if self.using_columns:
            raise BuilderError("JOIN ... ON ... cannot be combined with JOIN ... USING ...")
        self.on_conditions.append((c1, op, c2))
        return self

    def using(self, *columns: Any) -> Join:
        if self.on_conditions:
            raise BuilderError("JOIN ... ON ... cannot be combined with JOIN ... USING ...")
        self.using_columns.extend(columns)
        return self

    def compile(self, db: Any = None) -> str:
        from ..database import Database
        db = Database.resolve(db)
        sql = f"{self.join_type.upper()} JOIN" if self.join_type else "JOIN"
        sql += " " + db.quote_table(self.table)
        if self.using_columns:
            sql += " USING (" + ", ".join(db.quote_column(column) for column in self.using_columns) + ")"
        else:
            conditions = []
            for c1, op, c2 in self.on_conditions:
                op = f" {op.upper()}" if op else ""
                conditions.append(f"{db.quote_column(c1)}{op} {db.quote_column(c2)}")
            sql += " ON (" + " AND ".join(conditions) + ")"
        return sql

    def reset(self) -> Join:
        self.join_type = None
        self.table = None
        self.on_conditions = []
        self.using_columns = []
        return self
