"""MySQL driver talking to the server through pymysql.

Configuration::

    type: MySQLi
    connection:
      hostname: localhost
      database: app
      username: app
      password: secret
      port: 3306
    charset: utf8mb4

Rows are fetched eagerly and returned as a CachedResult.
"""

import logging
from typing import Any, Optional

from ..database import Database
from ..exceptions import DatabaseConnectionError
from ..hydration import make_row_mapper
from ..result import CachedResult
from ..types import InsertResult, ParamType, QueryType
from .placeholders import bind_parameters

logger = logging.getLogger("quarry")

_TYPE_TAGS = {
    ParamType.INT: "i",
    ParamType.BOOL: "i",
    ParamType.LOB: "b",
}


class MySQLiDriver(Database):
    """Driver for MySQL and MariaDB (configuration type ``MySQLi``)."""

    identifier = "`"

    def connect(self) -> None:
        if self._connection is not None:
            return
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        params = self.config.connection
        logger.info("Connecting to MySQL database %s on %s", params.get("database"), params.get("hostname"))
        try:
            connection = pymysql.connect(
                host=params.get("hostname") or "localhost",
                user=params.get("username"),
                password=params.get("password") or "",
                database=params.get("database"),
                port=int(params.get("port") or 3306),
                autocommit=True,
            )
        except pymysql.err.MySQLError as error:
            raise self._database_error(error, None, DatabaseConnectionError) from error
        self._connection = connection
        # credentials are not kept once connected
        self.config.connection = {}
        if self.config.charset:
            self.set_charset(self.config.charset)

    def disconnect(self) -> bool:
        connection, self._connection = self._connection, None
        if connection is not None:
            logger.info("Disconnecting %s", self.name)
            import pymysql  # pylint: disable=import-outside-toplevel,import-error
            try:
                connection.close()
            except pymysql.err.MySQLError:
                # already closed by the server
                logger.debug("MySQL connection %s was already closed", self.name)
        return super().disconnect()

    def set_charset(self, charset: str) -> None:
        self.connect()
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        try:
            self._connection.set_character_set(charset)
        except pymysql.err.MySQLError as error:
            raise self._database_error(error) from error

    def query(
        self,
        query_type: QueryType,
        sql: str,
        parameters: Optional[dict] = None,
        as_object: Any = False,
        object_params: Optional[Any] = None,
    ):
        self.connect()
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        # ':name' and '?' both become positional %s markers
        bound = bind_parameters(sql, parameters, "format", backslash_escapes=True)
        if bound.types:
            logger.debug("Binding parameters %s", "".join(_TYPE_TAGS.get(t, "s") for t in bound.types))

        with self._benchmark(sql):
            cursor = self._connection.cursor()
            try:
                cursor.execute(bound.sql, bound.args)
                if query_type == QueryType.SELECT:
                    columns = [column[0] for column in (cursor.description or ())]
                    mapper = make_row_mapper(as_object, object_params)
                    rows = [mapper(dict(zip(columns, raw))) for raw in cursor.fetchall()]
                    result: Any = CachedResult(rows, sql, parameters, as_object, object_params)
                elif query_type == QueryType.INSERT:
                    result = InsertResult(cursor.lastrowid, cursor.rowcount)
                else:
                    result = cursor.rowcount
            except pymysql.err.MySQLError as error:
                raise self._database_error(error, sql) from error
            finally:
                cursor.close()

        self.last_query = sql
        return result

    def _run(self, sql: str) -> None:
        self.connect()
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        cursor = self._connection.cursor()
        try:
            cursor.execute(sql)
        except pymysql.err.MySQLError as error:
            raise self._database_error(error, sql) from error
        finally:
            cursor.close()

    def begin(self, mode: Optional[str] = None) -> bool:
        self.connect()
        if mode:
            self._run(f"START TRANSACTION {mode}")
            return True
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        try:
            self._connection.begin()
        except pymysql.err.MySQLError as error:
            raise self._database_error(error, "START TRANSACTION") from error
        return True

    def commit(self) -> bool:
        self.connect()
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        try:
            self._connection.commit()
        except pymysql.err.MySQLError as error:
            raise self._database_error(error, "COMMIT") from error
        return True

    def rollback(self) -> bool:
        self.connect()
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        try:
            self._connection.rollback()
        except pymysql.err.MySQLError as error:
            raise self._database_error(error, "ROLLBACK") from error
        return True

    def escape(self, value: Any) -> str:
        self.connect()
        return "'" + self._connection.escape_string(str(value)) + "'"
