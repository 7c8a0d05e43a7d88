import pytest

from quarry import cache, config, profiler
from quarry.transaction import _transaction_managers
from quarry.database import Database
from quarry.drivers import register_driver

from tests.helpers import FixtureDriver, create_users_table

register_driver("fixture", FixtureDriver)


@pytest.fixture(autouse=True)
def clean_state():
    """Forget instances, configurations, cache and profiler between tests."""
    yield
    for db in list(Database.instances.values()):
        db.disconnect()
    Database.instances.clear()
    config.clear_configs()
    cache.set_cache(None)
    profiler.set_profiler(None)
    _transaction_managers.clear()


@pytest.fixture
def fixture_db() -> FixtureDriver:
    """Default instance backed by the recording fixture driver."""
    config.configure("default", {"type": "fixture"})
    return Database.instance()


@pytest.fixture
def prefixed_db() -> FixtureDriver:
    """Fixture driver instance with table prefix ``p_``."""
    return Database.instance("prefixed", {"type": "fixture", "table_prefix": "p_"})


@pytest.fixture
def sqlite_db() -> Database:
    """Default instance on a private in-memory SQLite database."""
    config.configure("default", {"type": "PDO", "connection": {"dsn": "sqlite::memory:"}})
    return Database.instance()


@pytest.fixture
def users_db(sqlite_db) -> Database:
    """SQLite instance with a filled ``users`` table."""
    create_users_table(sqlite_db)
    return sqlite_db
