"""SQLite dialect."""

import logging
import sqlite3
from typing import Any, ClassVar, Optional

from .base import Dialect

logger = logging.getLogger(__name__)


class SqliteDialect(Dialect):
    """Dialect for SQLite (scheme sqlite)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("sqlite",)
    PARAMSTYLE: ClassVar[str] = "named"

    def connect(self, url: str) -> sqlite3.Connection:
        parsed = self.parse_url(url)
        path = (parsed.path or "")[1:] or parsed.hostname or ":memory:"
        logger.info("Connecting to SQLite database %s", path)
        # isolation_level=None: autocommit, transactions are opened explicitly with BEGIN
        conn = sqlite3.connect(path, isolation_level=None, check_same_thread=False)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def error_classes(self) -> tuple[type[BaseException], ...]:
        return (sqlite3.Error,)

    def charset_sql(self, charset: str) -> Optional[str]:
        # the encoding of an SQLite database is fixed when it is created
        return None

    def create_function(self, connection: Any, name: str, callback, arguments: int = -1) -> bool:
        connection.create_function(name, arguments, callback)
        return True

    def create_aggregate(self, connection: Any, name: str, aggregate_class: type, arguments: int = -1) -> bool:
        connection.create_aggregate(name, arguments, aggregate_class)
        return True
