"""Base for statements with WHERE, ORDER BY and LIMIT clauses."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field

from .base import GroupClose, GroupOpen, Predicate, QueryBuilder


class Where(QueryBuilder):
    """Fluent WHERE / ORDER BY / LIMIT clauses shared by SELECT, UPDATE and DELETE."""

    where_entries: list[Any] = Field(default_factory=list)
    """GroupOpen, GroupClose and Predicate entries, in call order."""
    order_by_entries: list[tuple[Any, Optional[str]]] = Field(default_factory=list)
    """(column, direction) pairs."""
    limit_value: Optional[int] = None
    """Optional LIMIT (stored to avoid shadowing the limit() method)."""

    def where(self, column: Any, op: str, value: Any) -> Where:
        """Alias of and_where()."""
        return self.and_where(column, op, value)

    def and_where(self, column: Any, op: str, value: Any) -> Where:
        """Add ``AND column op value``.

        Examples:
            .where("id", "=", 5)
            .where("age", "between", (18, 65))
            .where("deleted_at", "=", None)     # deleted_at IS NULL
            .where("id", "in", [1, 2, 3])
            .where("id", "=", ":id")            # bound with set_param(":id", ...)
        """
        self.where_entries.append(Predicate(logic="AND", column=column, op=op, value=value))
        return self

    def or_where(self, column: Any, op: str, value: Any) -> Where:
        self.where_entries.append(Predicate(logic="OR", column=column, op=op, value=value))
        return self

    def where_open(self) -> Where:
        """Alias of and_where_open()."""
        return self.and_where_open()

    def and_where_open(self) -> Where:
        self.where_entries.append(GroupOpen(logic="AND"))
        return self

    def or_where_open(self) -> Where:
        self.where_entries.append(GroupOpen(logic="OR"))
        return self

    def where_close(self) -> Where:
        """Alias of and_where_close()."""
        return self.and_where_close()

    def where_close_empty(self) -> Where:
        """Close the current group, or remove it when nothing was added since it was opened."""
        if self.where_entries and isinstance(self.where_entries[-1], GroupOpen):
            self.where_entries.pop()
            return self
        return self.where_close()

    def and_where_close(self) -> Where:
        self.where_entries.append(GroupClose(logic="AND"))
        return self

    def or_where_close(self) -> Where:
        self.where_entries.append(GroupClose(logic="OR"))
        return self

    def order_by(self, column: Any, direction: Optional[str] = None) -> Where:
        """Add a sort column; direction is ``asc`` or ``desc`` (any case)."""
        self.order_by_entries.append((column, direction))
        return self

    def limit(self, number: Optional[int]) -> Where:
        """Return at most number rows; None removes the limit."""
        self.limit_value = number
        return self

    def _compile_where_tail(self, db: Any) -> str:
        """`` WHERE ... ORDER BY ... LIMIT ...`` for UPDATE and DELETE."""
        sql = ""
        if self.where_entries:
            sql += " WHERE " + self.compile_conditions(db, self.where_entries)
        if self.order_by_entries:
            sql += " " + self.compile_order_by(db, self.order_by_entries)
        if self.limit_value is not None:
            sql += f" LIMIT {self.limit_value}"
        return sql

    def _reset_where(self) -> None:
        self.where_entries = []
        self.order_by_entries = []
        self.limit_value = None
        self._clear_query()
