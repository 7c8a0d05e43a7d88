"""Database dialects: one class per engine (SQLite, MySQL, PostgreSQL, SQL Server)."""

import urllib.parse
from typing import Optional

from .base import Dialect
from .sqlite import SqliteDialect
from .mysql import MysqlDialect
from .postgres import PostgresDialect
from .sqlserver import SqlserverDialect

_DIALECT_CLASSES: tuple[type[Dialect], ...] = (
    SqliteDialect,
    MysqlDialect,
    PostgresDialect,
    SqlserverDialect,
)


def get_dialect_for_scheme(scheme: str) -> Dialect:
    """Return a Dialect instance for the given URL scheme (e.g. 'sqlite', 'mysql')."""
    normalized = (scheme or "").split("+")[0].lower()
    for dialect_cls in _DIALECT_CLASSES:
        if normalized in dialect_cls.SUPPORTED_SCHEMA:
            return dialect_cls()
    raise ValueError(f"Unsupported database scheme: {scheme}")


def dsn_to_url(dsn: str, username: Optional[str] = None, password: Optional[str] = None) -> str:
    """Turn a DSN into a connection URL, merging explicit credentials.

    Accepts URLs (``mysql://user:pw@host/db``, ``sqlite:////abs/path``) as well
    as PDO-style DSNs (``mysql:host=localhost;dbname=test;port=3307``,
    ``sqlite:/abs/path``, ``sqlite::memory:``).

    Examples:
    >>> dsn_to_url("mysql:host=localhost;dbname=test", "root", "")
    'mysql://root@localhost/test'
    >>> dsn_to_url("sqlite::memory:")
    'sqlite:///:memory:'
    """
    if not dsn or ":" not in dsn:
        raise ValueError(f"Invalid DSN: {dsn!r}")
    if "://" in dsn:
        parsed = urllib.parse.urlparse(dsn)
        if username is None and password is None:
            return dsn
        host = parsed.hostname or ""
        if parsed.port:
            host = f"{host}:{parsed.port}"
        netloc = _userinfo(
            username if username is not None else parsed.username,
            password if password is not None else parsed.password,
        ) + host
        return urllib.parse.urlunparse(parsed._replace(netloc=netloc))

    scheme, rest = dsn.split(":", 1)
    scheme = scheme.lower()
    if scheme == "sqlite":
        if rest in ("", ":memory:"):
            return "sqlite:///:memory:"
        return f"sqlite:///{rest}"
    options = {}
    for part in rest.split(";"):
        if "=" in part:
            key, value = part.split("=", 1)
            options[key.strip().lower()] = value.strip()
    host = options.get("host") or options.get("server") or "localhost"
    if options.get("port"):
        host = f"{host}:{options['port']}"
    database = options.get("dbname") or options.get("database") or ""
    return f"{scheme}://{_userinfo(username, password)}{host}/{database}"


def _userinfo(username: Optional[str], password: Optional[str]) -> str:
    if not username:
        return ""
    userinfo = urllib.parse.quote(username, safe="")
    if password:
        userinfo += ":" + urllib.parse.quote(password, safe="")
    return userinfo + "@"


__all__ = [
    "Dialect",
    "SqliteDialect",
    "MysqlDialect",
    "PostgresDialect",
    "SqlserverDialect",
    "dsn_to_url",
    "get_dialect_for_scheme",
]
