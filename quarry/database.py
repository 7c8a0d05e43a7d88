"""Database connection wrapper: the contract shared by every driver.

Get a database with ``Database.instance(name)`` where name is a configured
instance (see ``quarry.config``). The first call builds the driver selected by
the ``type`` of the configuration and registers it; later calls return the
same object until it is disconnected.

    db = Database.instance()
    db.query(QueryType.SELECT, "SELECT * FROM users WHERE id = ?", {1: (5, ParamType.INT)})
"""

from __future__ import annotations

import decimal
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, ClassVar, Iterator, Optional

from .config import DatabaseConfig, get_config, make_config
from .exceptions import DatabaseError
from .profiler import get_profiler
from .settings import get_settings
from .types import QueryType

logger = logging.getLogger("quarry")


class Database(ABC):
    """Base driver: connection lifecycle, execution, and quoting rules."""

    instances: ClassVar[dict[str, Database]] = {}
    """Registered instances, keyed by instance name."""
    _lock: ClassVar[threading.RLock] = threading.RLock()

    identifier: str = '"'
    """Character quoting identifiers; an empty string disables quoting."""

    @classmethod
    def instance(cls, name: Optional[str] = None, config: Optional[DatabaseConfig | dict] = None) -> Database:
        """Return the registered instance for name, building it on first use.

        Args:
            name: Instance name; defaults to ``settings.default_instance``.
            config: Configuration to use instead of the registered one (only
                consulted when the instance does not exist yet).

        Raises:
            ConfigurationError: No configuration, or no ``type`` in it.
        """
        if name is None:
            name = get_settings().default_instance
        with Database._lock:
            db = Database.instances.get(name)
            if db is None:
                if config is None:
                    config = get_config(name)
                config = make_config(name, config)
                from .drivers import get_driver_class
                driver_class = get_driver_class(config.type)
                db = driver_class(name, config)
                Database.instances[name] = db
                logger.debug("Registered %s database instance %s", config.type, name)
            return db

    @classmethod
    def resolve(cls, db: Database | str | None) -> Database:
        """Return db itself, or the instance registered under that name."""
        if isinstance(db, Database):
            return db
        return cls.instance(db)

    def __init__(self, name: str, config: DatabaseConfig):
        self.name = name
        self.config = config.model_copy(deep=True)
        self.last_query: Optional[str] = None
        self._connection: Any = None
        if self.config.identifier is not None:
            self.identifier = self.config.identifier

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    # connection lifecycle

    @property
    def connected(self) -> bool:
        return self._connection is not None

    @abstractmethod
    def connect(self) -> None:
        """Open the native connection; does nothing when already connected.

        Raises:
            DatabaseConnectionError: The native connection failed.
        """
        ...  # pylint: disable=unnecessary-ellipsis

    def disconnect(self) -> bool:
        """Forget this instance in the registry. Drivers release their handle first."""
        with Database._lock:
            if Database.instances.get(self.name) is self:
                del Database.instances[self.name]
        return True

    @abstractmethod
    def set_charset(self, charset: str) -> None:
        """Set the connection character set."""
        ...  # pylint: disable=unnecessary-ellipsis

    # execution

    @abstractmethod
    def query(
        self,
        query_type: QueryType,
        sql: str,
        parameters: Optional[dict] = None,
        as_object: Any = False,
        object_params: Optional[Any] = None,
    ):
        """Execute a statement.

        Args:
            query_type: SELECT, INSERT, UPDATE or DELETE.
            sql: Statement, with ``?`` and/or ``:name`` placeholders.
            parameters: 1-based position or name -> ``(value, ParamType)``.
            as_object: Row shape, see ``quarry.hydration.make_row_mapper``.
            object_params: Constructor arguments for hydrated classes.

        Returns:
            A Result for SELECT, an InsertResult ``(insert_id, affected_rows)``
            for INSERT, the number of affected rows otherwise.

        Raises:
            DatabaseError: The database rejected the statement.
        """
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def _run(self, sql: str) -> None:
        """Execute a statement that returns nothing (transaction control, SET ...)."""
        ...  # pylint: disable=unnecessary-ellipsis

    @contextmanager
    def _benchmark(self, sql: str) -> Iterator[None]:
        """Bracket a native execution with a profiler span, discarded on failure."""
        logger.debug("[%s] %s", self.name, sql)
        profiler = get_profiler()
        token = profiler.start(f"Database ({self.name})", sql) if profiler is not None else None
        try:
            yield
        except BaseException:
            if token is not None:
                # this benchmark is worthless
                logger.debug("Discarding profiler span for failed statement")
                profiler.delete(token)
            raise
        if token is not None:
            profiler.stop(token)

    @staticmethod
    def _database_error(error: BaseException, sql: Optional[str] = None, error_class: type[DatabaseError] = DatabaseError) -> DatabaseError:
        """Build the normalized error for a native exception."""
        code = getattr(error, "sqlite_errorcode", None)
        if code is None and error.args and isinstance(error.args[0], int):
            code = error.args[0]
        if code is None:
            code = getattr(error, "pgcode", None)
        message = str(error.args[1]) if len(error.args) > 1 and isinstance(error.args[0], int) else str(error)
        return error_class(message, sql, code)

    # transactions

    @abstractmethod
    def begin(self, mode: Optional[str] = None) -> bool:
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def commit(self) -> bool:
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def rollback(self) -> bool:
        ...  # pylint: disable=unnecessary-ellipsis

    def savepoint(self, name: str) -> None:
        self._run(f"SAVEPOINT {self.quote_identifier(name)}")

    def release_savepoint(self, name: str) -> None:
        self._run(f"RELEASE SAVEPOINT {self.quote_identifier(name)}")

    def rollback_to_savepoint(self, name: str) -> None:
        self._run(f"ROLLBACK TO SAVEPOINT {self.quote_identifier(name)}")

    # helpers

    def count_records(self, table: Any) -> int:
        """Count the rows of a table (name, ``(name, alias)`` pair, or sub-query)."""
        sql = "SELECT COUNT(*) AS total_row_count FROM " + self.quote_table(table)
        with self.query(QueryType.SELECT, sql, None, False) as result:
            return int(result.get("total_row_count", 0))

    def table_prefix(self) -> str:
        return self.config.table_prefix

    # quoting

    @abstractmethod
    def escape(self, value: Any) -> str:
        """Return value as a quoted, escaped SQL string literal."""
        ...  # pylint: disable=unnecessary-ellipsis

    def quote(self, value: Any) -> str:
        """Quote a value for an SQL statement.

        Examples:
            db.quote(None)     # NULL
            db.quote(True)     # '1'
            db.quote(10)       # 10
            db.quote(3.14)     # 3.140000
            db.quote([1, 2])   # (1, 2)
            db.quote("fred")   # 'fred'
            db.quote("?")      # ? (bound parameter marker)

        Expressions are compiled, queries are compiled into sub-queries, other
        objects are converted with ``str()`` and escaped.
        """
        from .expression import Expression
        from .query import Query
        if isinstance(value, str) and value.strip() == "?":
            return "?"
        if value is None:
            return "NULL"
        if value is True:
            return "'1'"
        if value is False:
            return "'0'"
        if isinstance(value, Query):
            return "(" + value.compile(self) + ")"
        if isinstance(value, Expression):
            return value.compile(self)
        if isinstance(value, (list, tuple, set, frozenset)):
            return "(" + ", ".join(self.quote(item) for item in value) + ")"
        if isinstance(value, int):
            return str(int(value))
        if isinstance(value, float):
            # fixed notation, never locale dependent
            return f"{value:f}"
        if isinstance(value, decimal.Decimal):
            return format(value, "f")
        return self.escape(value)

    def _split_alias(self, value: Any) -> tuple[Any, Optional[str]]:
        if isinstance(value, (list, tuple)):
            value, alias = value
            return value, str(alias).replace(self.identifier, self.identifier * 2)
        return value, None

    def _compile_identifier(self, value: Any) -> Optional[str]:
        """Compile sub-queries and expressions; None for plain names."""
        from .expression import Expression
        from .query import Query
        if isinstance(value, Query):
            return "(" + value.compile(self) + ")"
        if isinstance(value, Expression):
            return value.compile(self)
        return None

    def quote_column(self, column: Any) -> str:
        """Quote a column name, adding the table prefix to a ``table.column`` name.

        Accepts a name, a ``(column, alias)`` pair, an Expression or a sub-query.
        """
        q = self.identifier
        column, alias = self._split_alias(column)
        compiled = self._compile_identifier(column)
        if compiled is not None:
            column = compiled
        else:
            column = str(column).replace(q, q * 2)
            if column == "*":
                return column
            if "." in column:
                parts = column.split(".")
                prefix = self.table_prefix()
                if prefix:
                    # the table name is the 2nd-to-last part
                    parts[-2] = prefix + parts[-2]
                column = ".".join(part if part == "*" else f"{q}{part}{q}" for part in parts)
            else:
                column = f"{q}{column}{q}"
        if alias is not None:
            column += f" AS {q}{alias}{q}"
        return column

    def quote_table(self, table: Any) -> str:
        """Quote a table name and add the table prefix (to the alias too)."""
        q = self.identifier
        prefix = self.table_prefix()
        table, alias = self._split_alias(table)
        compiled = self._compile_identifier(table)
        if compiled is not None:
            table = compiled
        else:
            table = str(table).replace(q, q * 2)
            if "." in table:
                parts = table.split(".")
                if prefix:
                    parts[-1] = prefix + parts[-1]
                table = ".".join(f"{q}{part}{q}" for part in parts)
            else:
                table = f"{q}{prefix}{table}{q}"
        if alias is not None:
            table += f" AS {q}{prefix}{alias}{q}"
        return table

    def quote_identifier(self, value: Any) -> str:
        """Quote any identifier, without table prefix."""
        q = self.identifier
        value, alias = self._split_alias(value)
        compiled = self._compile_identifier(value)
        if compiled is not None:
            value = compiled
        else:
            value = str(value).replace(q, q * 2)
            value = ".".join(f"{q}{part}{q}" for part in value.split("."))
        if alias is not None:
            value += f" AS {q}{alias}{q}"
        return value
