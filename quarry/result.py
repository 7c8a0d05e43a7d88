"""Read-only, seekable, countable results of SELECT statements.

    result = select().from_("users").execute()
    len(result)              # number of rows
    result[0]                # first row
    for row in result: ...   # iterate (rewinds first)
    result.as_array("id")    # {id: row, ...}
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterator, Optional, Sequence

from .exceptions import ReadOnlyResultError
from .hydration import RowMapper, get_field, make_row_mapper, require_field

logger = logging.getLogger("quarry")


class Result(ABC):
    """Cursor-like view over the rows of an executed SELECT.

    Keeps the executed SQL and its parameters so the rows can be cached, and
    the requested row shape (``as_object``) for hydration.
    """

    def __init__(
        self,
        result: Any,
        sql: str,
        parameters: Optional[dict] = None,
        as_object: Any = False,
        object_params: Optional[Sequence[Any]] = None,
    ):
        self._result = result
        self.query = sql
        self.parameters = parameters
        self.as_object = as_object
        self.object_params = object_params or None
        self.total_rows = 0
        self.current_row = 0

    @abstractmethod
    def seek(self, offset: int) -> bool:
        """Move the cursor to offset; return False when no such row exists."""
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def current(self) -> Any:
        """Return the row under the cursor, or None past the end."""
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def close(self) -> None:
        """Release native resources held by the result."""
        ...  # pylint: disable=unnecessary-ellipsis

    def cached(self) -> CachedResult:
        """Return a fully in-memory copy of this result (e.g. for pickling)."""
        return CachedResult(self.as_array(), self.query, self.parameters, self.as_object, self.object_params)

    def as_array(self, key: Optional[str] = None, value: Optional[str] = None) -> list | dict:
        """Return the rows as a list or a dict; the cursor is rewound afterwards.

        Examples:
            result.as_array()              # [row, row, ...]
            result.as_array(None, "name")  # ["alice", "bob", ...]
            result.as_array("id")          # {1: row, 2: row, ...}
            result.as_array("id", "name")  # {1: "alice", 2: "bob", ...}
        """
        if key is None and value is None:
            results: list | dict = list(self)
        elif key is None:
            results = [require_field(row, value) for row in self]
        elif value is None:
            results = {require_field(row, key): row for row in self}
        else:
            results = {require_field(row, key): require_field(row, value) for row in self}
        self.rewind()
        return results

    def get(self, name: str, default: Any = None) -> Any:
        """Return the named column of the current row, without moving the cursor."""
        row = self.current()
        if row is None:
            return default
        found = get_field(row, name, default)
        return default if found is None else found

    def count(self) -> int:
        return self.total_rows

    def __len__(self) -> int:
        return self.total_rows

    def offset_exists(self, offset: int) -> bool:
        return 0 <= offset < self.total_rows

    def __getitem__(self, offset: int) -> Any:
        if not isinstance(offset, int):
            raise TypeError(f"Result indices must be integers, not {type(offset).__name__}")
        if not self.seek(offset):
            raise IndexError(f"Result row {offset} does not exist")
        return self.current()

    def __setitem__(self, offset: int, value: Any) -> None:
        raise ReadOnlyResultError("Database results are read-only")

    def __delitem__(self, offset: int) -> None:
        raise ReadOnlyResultError("Database results are read-only")

    def key(self) -> int:
        return self.current_row

    def next(self) -> Result:
        self.current_row += 1
        return self

    def prev(self) -> Result:
        self.current_row -= 1
        return self

    def rewind(self) -> Result:
        self.current_row = 0
        return self

    def valid(self) -> bool:
        return self.offset_exists(self.current_row)

    def __iter__(self) -> Iterator[Any]:
        self.rewind()
        while self.valid():
            yield self.current()
            self.next()

    def __bool__(self) -> bool:
        return self.total_rows > 0

    def __enter__(self) -> Result:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} rows={self.total_rows} sql={self.query!r}>"


class CachedResult(Result):
    """Result backed by a list of already hydrated rows."""

    def __init__(
        self,
        rows: list,
        sql: str,
        parameters: Optional[dict] = None,
        as_object: Any = False,
        object_params: Optional[Sequence[Any]] = None,
    ):
        super().__init__(list(rows), sql, parameters, as_object, object_params)
        self.total_rows = len(self._result)

    def cached(self) -> CachedResult:
        return self

    def close(self) -> None:
        # nothing native to release
        pass

    def seek(self, offset: int) -> bool:
        if self.offset_exists(offset):
            self.current_row = offset
            return True
        return False

    def current(self) -> Any:
        return self._result[self.current_row] if self.valid() else None


class CursorResult(Result):
    """Result reading rows from a live DB-API cursor.

    Rows are fetched as the cursor moves and kept, so seeking backwards never
    refetches. The cursor is closed as soon as every row has been read, on
    ``close()``, or when the result is used as a context manager and exits.
    When the native ``rowcount`` is not reliable for SELECT (reported as -1),
    all rows are fetched up front to count them.
    """

    def __init__(
        self,
        cursor: Any,
        sql: str,
        parameters: Optional[dict] = None,
        as_object: Any = False,
        object_params: Optional[Sequence[Any]] = None,
        row_mapper: Optional[RowMapper] = None,
    ):
        super().__init__(cursor, sql, parameters, as_object, object_params)
        self._columns = [column[0] for column in (cursor.description or ())]
        self._mapper = row_mapper or make_row_mapper(as_object, object_params)
        self._rows: list[Any] = []
        rowcount = getattr(cursor, "rowcount", -1)
        if cursor.description is None:
            self.total_rows = 0
            self.close()
        elif rowcount is not None and rowcount >= 0:
            self.total_rows = rowcount
        else:
            self._fetch_all()
            self.total_rows = len(self._rows)

    def _hydrate(self, raw: Sequence[Any]) -> Any:
        return self._mapper(dict(zip(self._columns, raw)))

    def _fetch_all(self) -> None:
        if self._result is None:
            return
        self._rows.extend(self._hydrate(raw) for raw in self._result.fetchall())
        self.close()

    def _fetch_until(self, offset: int) -> bool:
        while len(self._rows) <= offset:
            if self._result is None:
                return False
            raw = self._result.fetchone()
            if raw is None:
                # the driver over-reported its row count
                self.total_rows = len(self._rows)
                self.close()
                return False
            self._rows.append(self._hydrate(raw))
        if len(self._rows) >= self.total_rows:
            self.close()
        return True

    def seek(self, offset: int) -> bool:
        if not self.offset_exists(offset) or not self._fetch_until(offset):
            return False
        self.current_row = offset
        return True

    def current(self) -> Any:
        if not self.valid() or not self._fetch_until(self.current_row):
            return None
        return self._rows[self.current_row]

    def close(self) -> None:
        cursor, self._result = self._result, None
        if cursor is not None:
            cursor.close()

    def __del__(self):
        if getattr(self, "_result", None) is not None:
            self.close()
