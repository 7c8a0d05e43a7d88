"""Tests for the INSERT, UPDATE and DELETE builders, and the quarry.db shortcuts."""

import pytest

from quarry import BuilderError, Delete, Expression, Insert, InsertResult, Query, QueryType, Select, Update, db


class TestInsert:

    def test_multiple_rows(self, fixture_db):
        query = Insert("users", ["name", "age"]).values(["alice", 31], ["bob", 27])
        assert query.compile(fixture_db) == "INSERT INTO `users` (`name`, `age`) VALUES ('alice', 31), ('bob', 27)"

    def test_table_and_columns_methods(self, fixture_db):
        query = Insert().table("users").columns(["name"]).values(("alice",)).values(["bob"])
        assert query.compile(fixture_db) == "INSERT INTO `users` (`name`) VALUES ('alice'), ('bob')"

    def test_values_keep_parameters_and_expressions(self, fixture_db):
        query = Insert("users", ["name", "created", "age"]).values([":name", Expression("NOW()"), "?"])
        query.set_param(":name", "alice").set_param(1, 31)
        assert query.compile(fixture_db) == "INSERT INTO `users` (`name`, `created`, `age`) VALUES (:name, NOW(), ?)"

    def test_null_and_booleans(self, fixture_db):
        query = Insert("flags", ["a", "b", "c"]).values([None, True, False])
        assert query.compile(fixture_db) == "INSERT INTO `flags` (`a`, `b`, `c`) VALUES (NULL, '1', '0')"

    def test_insert_select(self, fixture_db):
        query = Insert("archive", ["id", "name"]).select(Select("id", "name").from_("users").where("age", ">", 40))
        assert query.compile(fixture_db) == (
            "INSERT INTO `archive` (`id`, `name`) SELECT `id`, `name` FROM `users` WHERE `age` > 40"
        )

    def test_table_prefix(self, prefixed_db):
        query = Insert("users", ["name"]).values(["alice"])
        assert query.compile(prefixed_db) == "INSERT INTO `p_users` (`name`) VALUES ('alice')"

    def test_select_after_values_is_rejected(self):
        query = Insert("users", ["name"]).values(["alice"])
        with pytest.raises(BuilderError, match="cannot be combined"):
            query.select(Select("name").from_("people"))

    def test_values_after_select_is_rejected(self):
        query = Insert("users", ["name"]).select(Select("name").from_("people"))
        with pytest.raises(BuilderError, match="cannot be combined"):
            query.values(["alice"])

    @pytest.mark.parametrize("source", [
        Query(QueryType.UPDATE, "UPDATE users SET a = 1"),
        "SELECT * FROM users",
    ])
    def test_only_select_queries_can_be_inserted(self, source):
        with pytest.raises(BuilderError, match="Only SELECT queries"):
            Insert("users", ["name"]).select(source)

    def test_raw_select_query_is_accepted(self, fixture_db):
        query = Insert("archive", ["id"]).select(Query(QueryType.SELECT, "SELECT id FROM users"))
        assert query.compile(fixture_db) == "INSERT INTO `archive` (`id`) SELECT id FROM users"

    def test_execute_returns_insert_id_and_row_count(self, fixture_db):
        fixture_db.insert_id = 42
        result = Insert("users", ["name"]).values(["alice"]).execute()
        assert result == InsertResult(42, 1)
        assert result.insert_id == 42
        assert fixture_db.calls[-1][0] == QueryType.INSERT

    def test_reset(self, fixture_db):
        query = Insert("users", ["name"]).select(Select().from_("people"))
        query.compile(fixture_db)
        query.reset()
        assert query.table_value is None
        assert query.column_names == []
        assert query.value_rows == []
        assert query.sql is None
        # values are accepted again
        query.table("users").columns(["name"]).values(["bob"])
        assert query.compile(fixture_db) == "INSERT INTO `users` (`name`) VALUES ('bob')"


class TestUpdate:

    def test_set_and_where(self, fixture_db):
        query = Update("users").set({"name": "alice", "age": 32}).where("id", "=", 1)
        assert query.compile(fixture_db) == "UPDATE `users` SET `name` = 'alice', `age` = 32 WHERE `id` = 1"

    def test_later_value_for_same_column_wins(self, fixture_db):
        query = Update("users").value("name", "a").value("age", 1).value("name", "b")
        assert query.compile(fixture_db) == "UPDATE `users` SET `name` = 'b', `age` = 1"

    def test_expression_and_parameter_values(self, fixture_db):
        query = Update("users").set({"visits": Expression("visits + 1"), "name": ":name"}).set_param(":name", "x")
        assert query.compile(fixture_db) == "UPDATE `users` SET `visits` = visits + 1, `name` = :name"

    def test_order_by_and_limit(self, fixture_db):
        query = Update().table("users").value("a", None).where("id", ">", 1).order_by("id", "desc").limit(1)
        assert query.compile(fixture_db) == "UPDATE `users` SET `a` = NULL WHERE `id` > 1 ORDER BY `id` DESC LIMIT 1"

    def test_table_prefix(self, prefixed_db):
        query = Update("users").value("users.name", "x")
        assert query.compile(prefixed_db) == "UPDATE `p_users` SET `p_users`.`name` = 'x'"

    def test_execute_returns_affected_rows(self, fixture_db):
        fixture_db.rows = [{}, {}]
        assert Update("users").value("a", 1).execute() == 2
        assert fixture_db.calls[-1][0] == QueryType.UPDATE

    def test_reset(self, fixture_db):
        query = Update("users").value("a", 1).where("id", "=", 1).limit(3)
        query.reset()
        assert query.table_value is None
        assert query.set_values == []
        assert query.where_entries == []
        assert query.limit_value is None


class TestDelete:

    def test_where_and_limit(self, fixture_db):
        query = Delete("users").where("id", "in", [1, 2]).limit(5)
        assert query.compile(fixture_db) == "DELETE FROM `users` WHERE `id` IN (1, 2) LIMIT 5"

    def test_everything(self, fixture_db):
        assert Delete().table("users").compile(fixture_db) == "DELETE FROM `users`"

    def test_table_prefix(self, prefixed_db):
        assert Delete("users").where("id", "=", 1).compile(prefixed_db) == "DELETE FROM `p_users` WHERE `id` = 1"

    def test_reset(self, fixture_db):
        query = Delete("users").where("id", "=", 1)
        query.compile(fixture_db)
        query.reset()
        assert query.table_value is None
        assert query.where_entries == []
        assert query.sql is None


class TestShortcuts:

    def test_builders(self):
        assert isinstance(db.select("id"), Select)
        assert db.select("id", "name").select_columns == ["id", "name"]
        assert db.select_array(["id", "name"]).select_columns == ["id", "name"]
        assert db.select_array().select_columns == []
        assert isinstance(db.insert("users", ["name"]), Insert)
        assert db.insert("users", ["name"]).column_names == ["name"]
        assert db.update("users").table_value == "users"
        assert db.delete("users").table_value == "users"

    def test_query_and_expression(self, fixture_db):
        query = db.query(QueryType.SELECT, "SELECT 1")
        assert query.query_type == QueryType.SELECT
        assert query.sql == "SELECT 1"
        assert db.expr("COUNT(*)").compile(fixture_db) == "COUNT(*)"
        assert db.expr("a = :a", {":a": "x"}).compile(fixture_db) == "a = 'x'"
