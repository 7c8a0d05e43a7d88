"""Tests for named instances (quarry.database.Database.instance) and configuration (quarry.config)."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from quarry import ConfigurationError, Database, DatabaseConfig, DatabaseError, configure, load_config_file
from quarry.config import get_config
from quarry.settings import get_settings
from tests.helpers import FixtureDriver


class TestInstance:

    def test_same_name_same_instance(self, fixture_db):
        assert Database.instance() is fixture_db
        assert Database.instance("default") is fixture_db

    def test_disconnect_then_instance_builds_a_new_one(self, fixture_db):
        fixture_db.connect()
        connection = fixture_db._connection  # pylint: disable=protected-access
        assert fixture_db.disconnect()
        fresh = Database.instance("default")
        assert fresh is not fixture_db
        fresh.connect()
        assert fresh._connection is not connection  # pylint: disable=protected-access

    def test_stale_instance_does_not_unregister_its_successor(self, fixture_db):
        fixture_db.disconnect()
        fresh = Database.instance()
        fixture_db.disconnect()
        assert Database.instances["default"] is fresh

    def test_explicit_config_is_used_once(self):
        db = Database.instance("adhoc", {"type": "fixture", "table_prefix": "a_"})
        assert db.table_prefix() == "a_"
        # ignored once the instance exists
        assert Database.instance("adhoc", {"type": "fixture", "table_prefix": "b_"}) is db
        with pytest.raises(ConfigurationError):
            get_config("adhoc")

    def test_config_model(self):
        db = Database.instance("model", DatabaseConfig(type="fixture", charset="utf8"))
        assert isinstance(db, FixtureDriver)
        assert db.config.charset == "utf8"

    def test_instance_owns_a_copy_of_its_config(self):
        config = configure("copy", {"type": "fixture", "connection": {"hostname": "a"}})
        db = Database.instance("copy")
        db.config.connection["hostname"] = "b"
        assert config.connection == {"hostname": "a"}

    def test_default_instance_name_from_settings(self, monkeypatch):
        monkeypatch.setattr(get_settings(), "default_instance", "main")
        configure("main", {"type": "fixture"})
        assert Database.instance().name == "main"

    def test_concurrent_first_calls_share_one_instance(self, fixture_db):
        fixture_db.disconnect()
        with ThreadPoolExecutor(max_workers=8) as pool:
            instances = list(pool.map(lambda _: Database.instance("default"), range(32)))
        assert all(db is instances[0] for db in instances)

    def test_str_and_repr(self, fixture_db):
        assert str(fixture_db) == "default"
        assert repr(fixture_db) == "<FixtureDriver 'default'>"


class TestResolve:

    def test_instance_passes_through(self, prefixed_db):
        assert Database.resolve(prefixed_db) is prefixed_db

    def test_name_and_default(self, fixture_db, prefixed_db):
        assert Database.resolve("prefixed") is prefixed_db
        assert Database.resolve(None) is fixture_db


class TestConfigurationErrors:

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError, match="No database configured with name=`nope`"):
            Database.instance("nope")

    def test_missing_type(self):
        with pytest.raises(ConfigurationError, match="Database type not defined in `x` configuration"):
            Database.instance("x", {"connection": {}})

    def test_unsupported_type(self):
        with pytest.raises(ConfigurationError, match="Unsupported database type: Oracle"):
            Database.instance("x", {"type": "Oracle"})
        assert "x" not in Database.instances

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            configure("x", ["fixture"])

    def test_invalid_field(self):
        with pytest.raises(ConfigurationError, match="Invalid `x` configuration"):
            configure("x", {"type": "fixture", "connection": "dsn"})

    def test_null_prefix_is_empty(self):
        assert configure("x", {"type": "fixture", "table_prefix": None}).table_prefix == ""

    def test_configuration_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            Database.instance("nope")


class TestConfigFiles:

    def test_yaml(self, tmp_path):
        path = tmp_path / "database.yaml"
        path.write_text(
            "default:\n"
            "  type: fixture\n"
            "  table_prefix: app_\n"
            "reporting:\n"
            "  type: PDO\n"
            "  connection:\n"
            "    dsn: 'sqlite::memory:'\n",
            encoding="utf-8",
        )
        assert load_config_file(path) == ["default", "reporting"]
        assert Database.instance().quote_table("users") == "`app_users`"
        assert get_config("reporting").connection == {"dsn": "sqlite::memory:"}

    def test_json(self, tmp_path):
        path = tmp_path / "database.json"
        path.write_text(json.dumps({"default": {"type": "fixture"}}), encoding="utf-8")
        assert load_config_file(str(path)) == ["default"]
        assert isinstance(Database.instance(), FixtureDriver)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_config_file(tmp_path / "missing.yaml")

    @pytest.mark.parametrize("filename, text", [
        ("database.yaml", "default: [unclosed\n"),
        ("database.json", "{\"default\": "),
    ])
    def test_malformed_file(self, tmp_path, filename, text):
        path = tmp_path / filename
        path.write_text(text, encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            load_config_file(path)

    def test_document_must_be_a_mapping(self, tmp_path):
        path = tmp_path / "database.yaml"
        path.write_text("- fixture\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping of instances"):
            load_config_file(path)

    def test_loaded_on_first_unknown_name(self, tmp_path, monkeypatch):
        path = tmp_path / "database.yaml"
        path.write_text("lazy:\n  type: fixture\n", encoding="utf-8")
        monkeypatch.setattr(get_settings(), "config_file", str(path))
        assert isinstance(Database.instance("lazy"), FixtureDriver)
        with pytest.raises(ConfigurationError):
            Database.instance("still-unknown")


class TestDatabaseError:

    def test_string_form(self):
        assert str(DatabaseError("boom")) == "boom"
        assert str(DatabaseError("boom", "SELECT 1", 7)) == "boom [ SELECT 1 ]"

    def test_codes_from_native_errors(self):
        class PgError(Exception):
            pgcode = "42P01"

        assert Database._database_error(Exception(1146, "no table")).code == 1146  # pylint: disable=protected-access
        assert Database._database_error(Exception(1146, "no table")).message == "no table"  # pylint: disable=protected-access
        error = Database._database_error(PgError("relation does not exist"), "SELECT 1")  # pylint: disable=protected-access
        assert error.code == "42P01"
        assert error.message == "relation does not exist"
        assert error.sql == "SELECT 1"
