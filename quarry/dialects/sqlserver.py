"""SQL Server dialect."""

from typing import Any, ClassVar, Optional

from .base import Dialect


class SqlserverDialect(Dialect):
    """Dialect for SQL Server (schemes mssql, sqlserver, sqlsrv)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("mssql", "sqlserver", "sqlsrv")
    BEGIN_SQL: ClassVar[str] = "BEGIN TRANSACTION"
    COMMIT_SQL: ClassVar[str] = "COMMIT TRANSACTION"
    ROLLBACK_SQL: ClassVar[str] = "ROLLBACK TRANSACTION"
    SAVEPOINT_SQL: ClassVar[str] = "SAVE TRANSACTION {name}"
    RELEASE_SAVEPOINT_SQL: ClassVar[Optional[str]] = None
    ROLLBACK_TO_SAVEPOINT_SQL: ClassVar[str] = "ROLLBACK TRANSACTION {name}"

    def connect(self, url: str):
        import pyodbc  # pylint: disable=import-outside-toplevel,import-error
        parsed = self.parse_url(url)
        username, password = self.credentials(parsed)
        database = (parsed.path or "").lstrip("/") or None
        port = parsed.port or 1433
        server = parsed.hostname or "localhost"
        if port and port != 1433:
            server = f"{server},{port}"
        conn_str = (
            f"DRIVER={{ODBC Driver 17 for SQL Server}};"
            f"SERVER={server};"
            f"DATABASE={database or ''};"
            f"UID={username or ''};"
            f"PWD={password or ''}"
        )
        return pyodbc.connect(conn_str, autocommit=True)

    def error_classes(self) -> tuple[type[BaseException], ...]:
        import pyodbc  # pylint: disable=import-outside-toplevel,import-error
        return (pyodbc.Error,)

    def charset_sql(self, charset: str) -> Optional[str]:
        return None

    def last_insert_id(self, connection: Any, cursor: Any) -> Any:
        cursor.execute("SELECT @@IDENTITY")
        row = cursor.fetchone()
        return row[0] if row else None
