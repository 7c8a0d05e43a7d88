"""Base Dialect type: subclasses implement connect() and the SQL that differs per engine."""

import urllib.parse
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from pydantic import BaseModel


class Dialect(BaseModel, ABC):
    """Base for database dialects used by the PDO-style driver.

    A dialect opens native DB-API connections for a URL and knows the few
    engine-specific details the driver needs: identifier quoting, the
    paramstyle of the DB-API module, literal escaping, transaction and
    charset statements, and which native exceptions to normalize.
    """

    model_config = {"arbitrary_types_allowed": True}

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ()
    """URL schemes this dialect handles (e.g. ('sqlite',), ('mssql', 'sqlserver'))."""

    IDENTIFIER: ClassVar[str] = '"'
    """Character quoting identifiers."""

    PARAMSTYLE: ClassVar[str] = "qmark"
    """DB-API paramstyle of the native module: qmark, named, format or pyformat."""

    BEGIN_SQL: ClassVar[str] = "BEGIN"
    COMMIT_SQL: ClassVar[str] = "COMMIT"
    ROLLBACK_SQL: ClassVar[str] = "ROLLBACK"

    SAVEPOINT_SQL: ClassVar[str] = "SAVEPOINT {identifier}"
    """Savepoint statement templates: ``{identifier}`` is the quoted name, ``{name}`` the bare one."""
    RELEASE_SAVEPOINT_SQL: ClassVar[Optional[str]] = "RELEASE SAVEPOINT {identifier}"
    """None when the engine has no release statement."""
    ROLLBACK_TO_SAVEPOINT_SQL: ClassVar[str] = "ROLLBACK TO SAVEPOINT {identifier}"

    BACKSLASH_ESCAPES: ClassVar[bool] = False
    """Whether a backslash in a string literal escapes the next character."""

    @abstractmethod
    def connect(self, url: str) -> Any:
        """Return a new raw driver connection for the given URL, in autocommit mode.

        The return value is engine-specific (e.g. sqlite3.Connection, pymysql.Connection).
        """
        ...  # pylint: disable=unnecessary-ellipsis

    @abstractmethod
    def error_classes(self) -> tuple[type[BaseException], ...]:
        """Native exception types raised by the DB-API module."""
        ...  # pylint: disable=unnecessary-ellipsis

    @staticmethod
    def parse_url(url: str) -> urllib.parse.ParseResult:
        return urllib.parse.urlparse(url)

    @staticmethod
    def credentials(parsed: urllib.parse.ParseResult) -> tuple[Optional[str], Optional[str]]:
        """Return the percent-decoded (username, password) of a parsed URL."""
        username = urllib.parse.unquote(parsed.username) if parsed.username else None
        password = urllib.parse.unquote(parsed.password) if parsed.password else None
        return username, password

    def escape(self, connection: Any, value: str) -> str:
        """Return value as a quoted SQL string literal (SQL standard: quotes are doubled)."""
        return "'" + str(value).replace("'", "''") + "'"

    def begin_sql(self, mode: Optional[str] = None) -> str:
        if mode:
            return f"{self.BEGIN_SQL} {mode}"
        return self.BEGIN_SQL

    def charset_sql(self, charset: str) -> Optional[str]:
        """Statement setting the connection charset, or None when the engine has none."""
        return f"SET NAMES {self.escape(None, charset)}"

    def last_insert_id(self, connection: Any, cursor: Any) -> Any:
        return cursor.lastrowid
