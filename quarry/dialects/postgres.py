"""PostgreSQL dialect."""

from typing import Any, ClassVar, Optional

from .base import Dialect


class PostgresDialect(Dialect):
    """Dialect for PostgreSQL (schemes postgresql, postgres, pgsql)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("postgresql", "postgres", "pgsql")
    PARAMSTYLE: ClassVar[str] = "pyformat"

    def connect(self, url: str):
        import psycopg2  # pylint: disable=import-outside-toplevel,import-error
        parsed = self.parse_url(url)
        username, password = self.credentials(parsed)
        conn = psycopg2.connect(
            host=parsed.hostname,
            user=username,
            password=password,
            database=(parsed.path or "")[1:] or None,
            port=parsed.port,
        )
        conn.autocommit = True
        return conn

    def error_classes(self) -> tuple[type[BaseException], ...]:
        import psycopg2  # pylint: disable=import-outside-toplevel,import-error
        return (psycopg2.Error,)

    def charset_sql(self, charset: str) -> Optional[str]:
        return f"SET client_encoding TO {self.escape(None, charset)}"

    def last_insert_id(self, connection: Any, cursor: Any) -> Any:
        """Return lastval(), or None when no sequence was used in this session."""
        # lastrowid is an OID, unset for tables created without OIDs
        import psycopg2  # pylint: disable=import-outside-toplevel,import-error
        # a failed statement would abort an open transaction block
        in_block = connection.get_transaction_status() == psycopg2.extensions.TRANSACTION_STATUS_INTRANS
        if in_block:
            cursor.execute("SAVEPOINT quarry_lastval")
        try:
            cursor.execute("SELECT lastval()")
        except psycopg2.Error:
            if in_block:
                cursor.execute("ROLLBACK TO SAVEPOINT quarry_lastval")
            return None
        row = cursor.fetchone()
        if in_block:
            cursor.execute("RELEASE SAVEPOINT quarry_lastval")
        return row[0] if row else None
