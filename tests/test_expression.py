"""Tests for quarry.expression.Expression."""

from quarry import Expression, Select


def test_text_is_never_escaped(fixture_db):
    assert Expression("CONCAT(first, ' ', last)").compile(fixture_db) == "CONCAT(first, ' ', last)"
    assert str(Expression("NOW()")) == "NOW()"


def test_parameters_are_quoted(fixture_db):
    expr = Expression("age BETWEEN :low AND :high OR name = :name", {":low": 18, ":high": 65})
    expr.param(":name", "o'neil")
    assert expr.compile(fixture_db) == "age BETWEEN 18 AND 65 OR name = 'o''neil'"


def test_longest_names_are_replaced_first(fixture_db):
    expr = Expression("a = :id AND b = :identifier", {":id": 1, ":identifier": "x"})
    assert expr.compile(fixture_db) == "a = 1 AND b = 'x'"


def test_substituted_values_are_not_substituted_again(fixture_db):
    expr = Expression(":a, :b", {":a": ":b", ":b": None})
    assert expr.compile(fixture_db) == "':b', NULL"


def test_parameters_merge_new_values_win(fixture_db):
    expr = Expression(":a + :b", {":a": 1, ":b": 2}).parameters({":b": 3})
    assert expr.params == {":a": 1, ":b": 3}
    assert expr.compile(fixture_db) == "1 + 3"


def test_bind_calls_supplier_at_compile_time(fixture_db):
    box = {"value": 1}
    expr = Expression("x > :min").bind(":min", lambda: box["value"])
    box["value"] = 10
    assert expr.compile(fixture_db) == "x > 10"


def test_list_and_subquery_parameters(fixture_db):
    expr = Expression("id IN :ids OR id IN :sub", {":ids": [1, 2], ":sub": Select("id").from_("admins")})
    assert expr.compile(fixture_db) == "id IN (1, 2) OR id IN (SELECT `id` FROM `admins`)"


def test_compile_uses_default_instance(fixture_db):
    assert Expression(":v", {":v": True}).compile() == "'1'"


def test_compile_with_instance_name(fixture_db, prefixed_db):
    expr = Expression(":v", {":v": Select().from_("users")})
    assert expr.compile("prefixed") == "(SELECT * FROM `p_users`)"
