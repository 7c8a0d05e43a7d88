"""Shared test helpers."""

from typing import Any, Optional

from quarry.database import Database
from quarry.drivers.placeholders import bind_parameters
from quarry.result import CachedResult
from quarry.types import InsertResult, QueryType


class FixtureDriver(Database):
    """In-memory driver recording every call and answering SELECTs with ``rows``.

    Bound values are laid out like a qmark DB-API module would receive them
    and recorded in ``bound``.
    """

    identifier = "`"

    def __init__(self, name, config):
        super().__init__(name, config)
        self.rows: list[dict[str, Any]] = []
        self.calls: list[tuple[QueryType, str, Optional[dict]]] = []
        self.bound: list[Any] = []
        self.transactions: list[str] = []
        self.insert_id = 1

    def connect(self) -> None:
        if self._connection is None:
            self._connection = object()

    def disconnect(self) -> bool:
        self._connection = None
        return super().disconnect()

    def set_charset(self, charset: str) -> None:
        self.transactions.append(f"SET NAMES {charset}")

    def query(self, query_type, sql, parameters=None, as_object=False, object_params=None):
        self.connect()
        with self._benchmark(sql):
            self.calls.append((query_type, sql, parameters))
            self.bound.append(bind_parameters(sql, parameters, "qmark"))
        self.last_query = sql
        if query_type == QueryType.SELECT:
            return CachedResult([dict(row) for row in self.rows], sql, parameters, as_object, object_params)
        if query_type == QueryType.INSERT:
            return InsertResult(self.insert_id, 1)
        return len(self.rows)

    def _run(self, sql: str) -> None:
        self.transactions.append(sql)

    def begin(self, mode=None) -> bool:
        self.transactions.append(f"BEGIN {mode}" if mode else "BEGIN")
        return True

    def commit(self) -> bool:
        self.transactions.append("COMMIT")
        return True

    def rollback(self) -> bool:
        self.transactions.append("ROLLBACK")
        return True

    def escape(self, value: Any) -> str:
        return "'" + str(value).replace("'", "''") + "'"


def create_users_table(db: Database) -> None:
    """Create and fill a ``users`` table (ids 1 to 3) on a SQLite instance."""
    db.query(QueryType.UPDATE, "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, age INTEGER)")
    for name, age in (("alice", 31), ("bob", 27), ("carol", 45)):
        db.query(QueryType.INSERT, "INSERT INTO users (name, age) VALUES (?, ?)", {1: name, 2: age})
