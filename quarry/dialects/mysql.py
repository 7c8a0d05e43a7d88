"""MySQL dialect."""

from typing import Any, ClassVar, Optional

from .base import Dialect


class MysqlDialect(Dialect):
    """Dialect for MySQL (scheme mysql)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("mysql", "mariadb")
    IDENTIFIER: ClassVar[str] = "`"
    PARAMSTYLE: ClassVar[str] = "pyformat"
    BEGIN_SQL: ClassVar[str] = "START TRANSACTION"
    BACKSLASH_ESCAPES: ClassVar[bool] = True

    def connect(self, url: str):
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        parsed = self.parse_url(url)
        username, password = self.credentials(parsed)
        return pymysql.connect(
            host=parsed.hostname,
            user=username,
            password=password or "",
            database=(parsed.path or "")[1:] or None,
            port=parsed.port or 3306,
            autocommit=True,
        )

    def error_classes(self) -> tuple[type[BaseException], ...]:
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        return (pymysql.err.MySQLError,)

    def escape(self, connection: Any, value: str) -> str:
        if connection is None:
            from pymysql.converters import escape_string  # pylint: disable=import-outside-toplevel,import-error
            return "'" + escape_string(str(value)) + "'"
        return "'" + connection.escape_string(str(value)) + "'"

    def charset_sql(self, charset: str) -> Optional[str]:
        return f"SET NAMES {self.escape(None, charset)}"
