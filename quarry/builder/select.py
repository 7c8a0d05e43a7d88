"""SELECT statement builder."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import Field

from ..exceptions import BuilderError
from ..types import QueryType
from .base import GroupClose, GroupOpen, Predicate
from .join import Join
from .where import Where


class Select(Where):
    """Fluent SELECT builder.

    Examples:
        Select("id", ("name", "username")).from_("users").where("id", ">", 10).order_by("name")
        Select().from_(("users", "u")).join("posts", "left").on("u.id", "=", "posts.user_id")
        Select(Expression("COUNT(*)")).from_("users").group_by("role").having("role", "!=", "admin")
    """

    select_columns: list[Any] = Field(default_factory=list)
    distinct_value: bool = False
    from_tables: list[Any] = Field(default_factory=list)
    joins: list[Join] = Field(default_factory=list)
    group_by_columns: list[Any] = Field(default_factory=list)
    having_entries: list[Any] = Field(default_factory=list)
    offset_value: Optional[int] = None
    """Optional OFFSET (stored to avoid shadowing the offset() method)."""
    unions: list[tuple[Any, bool]] = Field(default_factory=list)
    """(Select, all) pairs."""

    def __init__(self, *columns: Any, **data: Any):
        super().__init__(QueryType.SELECT, "", **data)
        self.select_columns = list(columns)

    def distinct(self, value: bool = True) -> Select:
        self.distinct_value = bool(value)
        return self

    def select(self, *columns: Any) -> Select:
        """Add columns: names, ``(column, alias)`` pairs, Expressions or sub-queries."""
        self.select_columns.extend(columns)
        return self

    def select_array(self, columns: Iterable[Any]) -> Select:
        self.select_columns.extend(columns)
        return self

    def from_(self, *tables: Any) -> Select:
        """Add tables: names, ``(table, alias)`` pairs or sub-queries."""
        self.from_tables.extend(tables)
        return self

    def join(self, table: Any, join_type: Optional[str] = None) -> Select:
        """Add a JOIN; following on()/using() calls apply to it."""
        self.joins.append(Join(table, join_type))
        return self

    def _last_join(self) -> Join:
        if not self.joins:
            raise BuilderError("ON and USING clauses need a JOIN first")
        return self.joins[-1]

    def on(self, c1: Any, op: Optional[str], c2: Any) -> Select:
        self._last_join().on(c1, op, c2)
        return self

    def using(self, *columns: Any) -> Select:
        self._last_join().using(*columns)
        return self

    def group_by(self, *columns: Any) -> Select:
        self.group_by_columns.extend(columns)
        return self

    def having(self, column: Any, op: str, value: Any = None) -> Select:
        """Alias of and_having()."""
        return self.and_having(column, op, value)

    def and_having(self, column: Any, op: str, value: Any = None) -> Select:
        self.having_entries.append(Predicate(logic="AND", column=column, op=op, value=value))
        return self

    def or_having(self, column: Any, op: str, value: Any = None) -> Select:
        self.having_entries.append(Predicate(logic="OR", column=column, op=op, value=value))
        return self

    def having_open(self) -> Select:
        return self.and_having_open()

    def and_having_open(self) -> Select:
        self.having_entries.append(GroupOpen(logic="AND"))
        return self

    def or_having_open(self) -> Select:
        self.having_entries.append(GroupOpen(logic="OR"))
        return self

    def having_close(self) -> Select:
        return self.and_having_close()

    def and_having_close(self) -> Select:
        self.having_entries.append(GroupClose(logic="AND"))
        return self

    def or_having_close(self) -> Select:
        self.having_entries.append(GroupClose(logic="OR"))
        return self

    def union(self, select: Select | str, all: bool = True) -> Select:  # pylint: disable=redefined-builtin
        """Append ``UNION [ALL] select``; a table name stands for ``SELECT * FROM table``."""
        if isinstance(select, str):
            select = Select().from_(select)
        if not isinstance(select, Select):
            raise BuilderError("First parameter must be a string or a Select query")
        self.unions.append((select, all))
        return self

    def offset(self, number: Optional[int]) -> Select:
        self.offset_value = number
        return self

    def compile(self, db: Any = None) -> str:
        from ..database import Database
        db = Database.resolve(db)

        query = "SELECT "
        if self.distinct_value:
            query += "DISTINCT "
        if not self.select_columns:
            query += "*"
        else:
            # de-duplicated, in order
            columns = dict.fromkeys(db.quote_column(column) for column in self.select_columns)
            query += ", ".join(columns)
        if self.from_tables:
            tables = dict.fromkeys(db.quote_table(table) for table in self.from_tables)
            query += " FROM " + ", ".join(tables)
        if self.joins:
            query += " " + self.compile_join(db, self.joins)
        if self.where_entries:
            query += " WHERE " + self.compile_conditions(db, self.where_entries)
        if self.group_by_columns:
            query += " " + self.compile_group_by(db, self.group_by_columns)
        if self.having_entries:
            query += " HAVING " + self.compile_conditions(db, self.having_entries)
        if self.order_by_entries:
            query += " " + self.compile_order_by(db, self.order_by_entries)
        if self.limit_value is not None:
            query += f" LIMIT {self.limit_value}"
        if self.offset_value is not None:
            query += f" OFFSET {self.offset_value}"
        for select, union_all in self.unions:
            query += " UNION "
            if union_all:
                query += "ALL "
            query += select.compile(db)

        self.sql = query
        return self.sql

    def reset(self) -> Select:
        self.select_columns = []
        self.distinct_value = False
        self.from_tables = []
        self.joins = []
        self.group_by_columns = []
        self.having_entries = []
        self.offset_value = None
        self.unions = []
        self._reset_where()
        return self
