"""Tests for quarry.transaction: transaction() context manager, savepoints, Transaction.execute()."""

import threading

import pytest

from quarry import Database, Insert, QueryType, Select, TransactionError, transaction
from quarry.transaction import TransactionManager, _transaction_managers


class TestStatements:

    def test_commit(self, fixture_db):
        with transaction() as t:
            result = t.execute(Insert("users", ["name"]).values(["alice"]))
        assert result.insert_id == 1
        assert fixture_db.transactions == ["BEGIN", "COMMIT"]
        assert fixture_db.calls[-1][1] == "INSERT INTO `users` (`name`) VALUES ('alice')"

    def test_rollback_and_reraise(self, fixture_db):
        with pytest.raises(ValueError, match="boom"):
            with transaction():
                raise ValueError("boom")
        assert fixture_db.transactions == ["BEGIN", "ROLLBACK"]

    def test_mode(self, fixture_db):
        with transaction(mode="READ ONLY"):
            pass
        assert fixture_db.transactions == ["BEGIN READ ONLY", "COMMIT"]

    def test_raw_sql(self, fixture_db):
        with transaction() as t:
            t.execute("UPDATE users SET age = ? WHERE id = ?", parameters={1: 30, 2: 1})
            t.execute("SELECT 1", QueryType.SELECT)
        assert fixture_db.calls == [
            (QueryType.UPDATE, "UPDATE users SET age = ? WHERE id = ?", {1: 30, 2: 1}),
            (QueryType.SELECT, "SELECT 1", None),
        ]

    def test_named_instance(self, fixture_db, prefixed_db):
        with transaction("prefixed") as t:
            assert t.db is prefixed_db
        assert prefixed_db.transactions == ["BEGIN", "COMMIT"]
        assert fixture_db.transactions == []


class TestNesting:

    def test_nested_levels_use_savepoints(self, fixture_db):
        with transaction() as outer:
            with transaction() as inner:
                assert (outer.level, inner.level) == (1, 2)
        assert fixture_db.transactions == [
            "BEGIN",
            "SAVEPOINT `savepoint_2`",
            "RELEASE SAVEPOINT `savepoint_2`",
            "COMMIT",
        ]

    def test_inner_failure_only_undoes_the_inner_block(self, fixture_db):
        with transaction():
            with pytest.raises(RuntimeError):
                with transaction():
                    with transaction():
                        raise RuntimeError
        assert fixture_db.transactions == [
            "BEGIN",
            "SAVEPOINT `savepoint_2`",
            "SAVEPOINT `savepoint_3`",
            "ROLLBACK TO SAVEPOINT `savepoint_3`",
            "ROLLBACK TO SAVEPOINT `savepoint_2`",
            "COMMIT",
        ]

    def test_outer_transaction_cannot_be_used_from_inner(self, fixture_db):
        with transaction() as outer:
            with transaction():
                with pytest.raises(TransactionError, match="Cannot use transaction level 1 from level 2"):
                    outer.execute("SELECT 1", QueryType.SELECT)
            outer.execute("SELECT 1", QueryType.SELECT)

    def test_finished_transaction_cannot_be_used(self, fixture_db):
        with transaction() as t:
            pass
        with pytest.raises(TransactionError, match="no longer active"):
            t.execute("SELECT 1", QueryType.SELECT)

    def test_level_is_restored_after_failure(self, fixture_db):
        with pytest.raises(KeyError):
            with transaction():
                raise KeyError("x")
        with transaction() as t:
            assert t.level == 1

    def test_levels_are_per_thread(self, fixture_db):
        levels = []

        def worker():
            with transaction() as t:
                levels.append(t.level)

        with transaction():
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()
        assert levels == [1]


class TestManagers:

    def test_one_manager_per_instance(self, fixture_db):
        with transaction():
            pass
        manager = _transaction_managers["default"]
        assert isinstance(manager, TransactionManager)
        with transaction():
            pass
        assert _transaction_managers["default"] is manager

    def test_replaced_instance_gets_a_new_manager(self, fixture_db):
        with transaction():
            pass
        fixture_db.disconnect()
        fresh = Database.instance()
        with transaction():
            pass
        assert _transaction_managers["default"].db is fresh
        assert fresh.transactions == ["BEGIN", "COMMIT"]


class TestSqlite:

    def test_commit_persists(self, users_db):
        with transaction() as t:
            t.execute(Insert("users", ["name", "age"]).values(["dave", 20]))
        assert users_db.count_records("users") == 4

    def test_rollback_discards(self, users_db):
        with pytest.raises(RuntimeError):
            with transaction() as t:
                t.execute(Insert("users", ["name", "age"]).values(["dave", 20]))
                raise RuntimeError
        assert users_db.count_records("users") == 3

    def test_savepoint_rollback_keeps_outer_changes(self, users_db):
        with transaction() as outer:
            outer.execute(Insert("users", ["name", "age"]).values(["dave", 20]))
            with pytest.raises(RuntimeError):
                with transaction() as inner:
                    inner.execute(Insert("users", ["name", "age"]).values(["erin", 21]))
                    raise RuntimeError
        names = Select("name").from_("users").order_by("id").execute().as_array(None, "name")
        assert names == ["alice", "bob", "carol", "dave"]
