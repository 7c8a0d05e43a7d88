"""Generic driver over any engine with a dialect (SQLite, MySQL, PostgreSQL, SQL Server).

Configuration::

    type: PDO
    connection:
      dsn: mysql:host=localhost;dbname=app    # or a URL: mysql://localhost/app
      username: app
      password: secret
      persistent: false

SELECT results read rows from the live cursor as they are accessed.
"""

import logging
import threading
import urllib.parse
from typing import Any, Callable, Optional

from ..config import DatabaseConfig
from ..database import Database
from ..dialects import SqliteDialect, dsn_to_url, get_dialect_for_scheme
from ..exceptions import ConfigurationError, DatabaseConnectionError, DatabaseError
from ..result import CursorResult
from ..types import InsertResult, QueryType
from .placeholders import bind_parameters

logger = logging.getLogger("quarry")

# persistent handles outlive the instances using them
_persistent_connections: dict[tuple[str, Optional[str]], Any] = {}
_persistent_lock = threading.Lock()


class PDODriver(Database):
    """Driver selecting its dialect from the DSN (configuration type ``PDO``)."""

    def __init__(self, name: str, config: DatabaseConfig):
        super().__init__(name, config)
        params = self.config.connection
        dsn = params.get("dsn")
        if not dsn:
            raise ConfigurationError(f"No dsn in `{name}` connection configuration")
        try:
            self._url: Optional[str] = dsn_to_url(dsn, params.get("username"), params.get("password"))
            self.dialect = get_dialect_for_scheme(urllib.parse.urlparse(self._url).scheme)
        except ValueError as error:
            raise ConfigurationError(f"Invalid `{name}` configuration: {error}") from error
        if self.config.identifier is None:
            self.identifier = self.dialect.IDENTIFIER
        self._persistent_key = (dsn, params.get("username")) if params.get("persistent") else None

    def connect(self) -> None:
        if self._connection is not None:
            return
        key = self._persistent_key
        with _persistent_lock:
            connection = _persistent_connections.get(key) if key else None
            if connection is None:
                logger.info("Connecting %s to %s", self.name, self.dialect.SUPPORTED_SCHEMA[0])
                try:
                    connection = self.dialect.connect(self._url)
                except self.dialect.error_classes() as error:
                    raise self._database_error(error, None, DatabaseConnectionError) from error
                if key:
                    _persistent_connections[key] = connection
            else:
                logger.debug("Reusing persistent connection for %s", self.name)
        self._connection = connection
        # credentials are not kept once connected
        self.config.connection = {}
        self._url = None
        if self.config.charset:
            self.set_charset(self.config.charset)

    def disconnect(self) -> bool:
        connection, self._connection = self._connection, None
        if connection is not None:
            logger.info("Disconnecting %s", self.name)
        if connection is not None and self._persistent_key is None:
            try:
                connection.close()
            except self.dialect.error_classes():
                logger.debug("Connection %s was already closed", self.name)
        return super().disconnect()

    def set_charset(self, charset: str) -> None:
        sql = self.dialect.charset_sql(charset)
        if sql is not None:
            self._run(sql)

    def query(
        self,
        query_type: QueryType,
        sql: str,
        parameters: Optional[dict] = None,
        as_object: Any = False,
        object_params: Optional[Any] = None,
    ):
        self.connect()
        bound = bind_parameters(sql, parameters, self.dialect.PARAMSTYLE, self.dialect.BACKSLASH_ESCAPES)

        with self._benchmark(sql):
            cursor = self._connection.cursor()
            try:
                if bound.args is None:
                    cursor.execute(bound.sql)
                else:
                    cursor.execute(bound.sql, bound.args)
                if query_type == QueryType.SELECT:
                    result: Any = CursorResult(cursor, sql, parameters, as_object, object_params)
                elif query_type == QueryType.INSERT:
                    # read before last_insert_id, which may reuse the cursor
                    affected_rows = cursor.rowcount
                    result = InsertResult(self.dialect.last_insert_id(self._connection, cursor), affected_rows)
                else:
                    result = cursor.rowcount
            except self.dialect.error_classes() as error:
                cursor.close()
                raise self._database_error(error, sql) from error
            if query_type != QueryType.SELECT:
                cursor.close()

        self.last_query = sql
        return result

    def _run(self, sql: str) -> None:
        self.connect()
        cursor = self._connection.cursor()
        try:
            cursor.execute(sql)
        except self.dialect.error_classes() as error:
            raise self._database_error(error, sql) from error
        finally:
            cursor.close()

    def begin(self, mode: Optional[str] = None) -> bool:
        self._run(self.dialect.begin_sql(mode))
        return True

    def commit(self) -> bool:
        self._run(self.dialect.COMMIT_SQL)
        return True

    def rollback(self) -> bool:
        self._run(self.dialect.ROLLBACK_SQL)
        return True

    def _savepoint_sql(self, template: str, name: str) -> str:
        return template.format(name=name, identifier=self.quote_identifier(name))

    def savepoint(self, name: str) -> None:
        self._run(self._savepoint_sql(self.dialect.SAVEPOINT_SQL, name))

    def release_savepoint(self, name: str) -> None:
        if self.dialect.RELEASE_SAVEPOINT_SQL is None:
            # released with the enclosing transaction
            return
        self._run(self._savepoint_sql(self.dialect.RELEASE_SAVEPOINT_SQL, name))

    def rollback_to_savepoint(self, name: str) -> None:
        self._run(self._savepoint_sql(self.dialect.ROLLBACK_TO_SAVEPOINT_SQL, name))

    def escape(self, value: Any) -> str:
        self.connect()
        return self.dialect.escape(self._connection, value)

    def _sqlite(self, feature: str) -> SqliteDialect:
        if not isinstance(self.dialect, SqliteDialect):
            raise DatabaseError(f"{feature} are only supported by SQLite databases")
        self.connect()
        return self.dialect

    def create_function(self, name: str, callback: Callable, arguments: int = -1) -> bool:
        """Register a Python function callable from SQL (SQLite only)."""
        return self._sqlite("User-defined functions").create_function(self._connection, name, callback, arguments)

    def create_aggregate(self, name: str, aggregate_class: type, arguments: int = -1) -> bool:
        """Register an aggregate class with step()/finalize() callable from SQL (SQLite only)."""
        return self._sqlite("User-defined aggregates").create_aggregate(self._connection, name, aggregate_class, arguments)
