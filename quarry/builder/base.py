"""Base type for query builders: the clause compilers shared by every statement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Literal, Union

from pydantic import BaseModel

from ..query import Query

Logic = Literal["AND", "OR"]


class GroupOpen(BaseModel):
    """Opening parenthesis of a condition group."""

    logic: Logic = "AND"


class GroupClose(BaseModel):
    """Closing parenthesis of a condition group."""

    logic: Logic = "AND"


class Predicate(BaseModel):
    """``column op value``, joined to the previous condition with logic."""

    model_config = {"arbitrary_types_allowed": True}

    logic: Logic = "AND"
    column: Any
    """Column name, ``(column, alias)`` pair, Expression, or a false value for none."""
    op: str
    value: Any = None


Condition = Union[GroupOpen, GroupClose, Predicate]


class QueryBuilder(Query, ABC):
    """Query assembled from clauses and compiled into ``sql`` for a database.

    Subclasses keep their clauses in fields, add fluent methods mutating them,
    and implement ``compile(db)`` and ``reset()``.
    """

    @abstractmethod
    def compile(self, db: Any = None) -> str:
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def reset(self) -> QueryBuilder:
        """Clear every clause, the parameters and the compiled SQL."""
        ...  # pylint: disable=unnecessary-ellipsis

    def _clear_query(self) -> None:
        self.parameters = {}
        self.sql = None

    def _is_parameter(self, value: Any) -> bool:
        """Tell whether value names a bound parameter, which is never quoted."""
        return isinstance(value, str) and value in self.parameters

    def compile_join(self, db: Any, joins: Iterable[Any]) -> str:
        return " ".join(join.compile(db) for join in joins)

    def compile_conditions(self, db: Any, conditions: Iterable[Condition]) -> str:
        """Compile WHERE or HAVING conditions.

        The logic operator of a condition is emitted only between conditions,
        never first and never right after an opening parenthesis.
        """
        sql = ""
        last_condition = None
        for condition in conditions:
            if isinstance(condition, GroupClose):
                sql += ")"
            else:
                if sql and not isinstance(last_condition, GroupOpen):
                    sql += f" {condition.logic} "
                if isinstance(condition, GroupOpen):
                    sql += "("
                else:
                    sql += self._compile_predicate(db, condition)
            last_condition = condition
        return sql

    def _compile_predicate(self, db: Any, predicate: Predicate) -> str:
        column, op, value = predicate.column, predicate.op, predicate.value
        if value is None:
            if op == "=":
                op = "IS"
            elif op == "!=":
                op = "IS NOT"
        op = op.upper()

        if op == "BETWEEN" and isinstance(value, (list, tuple)):
            low, high = value
            value = f"{self._quote_bound(db, low)} AND {self._quote_bound(db, high)}"
        elif not self._is_parameter(value):
            value = db.quote(value)

        if not column:
            column = ""
        elif isinstance(column, (list, tuple)):
            # the column name only, without alias
            column = db.quote_identifier(column[0])
        else:
            column = db.quote_column(column)
        return f"{column} {op} {value}".strip()

    def _quote_bound(self, db: Any, value: Any) -> str:
        if self._is_parameter(value) or (isinstance(value, str) and value.strip() == "?"):
            return value
        return db.quote(value)

    def compile_set(self, db: Any, pairs: Iterable[tuple[Any, Any]]) -> str:
        assignments: dict[str, str] = {}
        for column, value in pairs:
            column = db.quote_column(column)
            if not self._is_parameter(value):
                value = db.quote(value)
            assignments[column] = f"{column} = {value}"
        return ", ".join(assignments.values())

    def _quote_sort_column(self, db: Any, column: Any) -> str:
        if isinstance(column, (list, tuple)):
            # the alias
            return db.quote_identifier(column[-1])
        return db.quote_column(column)

    def compile_group_by(self, db: Any, columns: Iterable[Any]) -> str:
        return "GROUP BY " + ", ".join(self._quote_sort_column(db, column) for column in columns)

    def compile_order_by(self, db: Any, columns: Iterable[tuple[Any, Any]]) -> str:
        sort = []
        for column, direction in columns:
            column = self._quote_sort_column(db, column)
            if direction:
                column += " " + str(direction).upper()
            sort.append(column)
        return "ORDER BY " + ", ".join(sort)
