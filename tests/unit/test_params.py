"""Unit tests for SQL placeholder scanning."""

from __future__ import annotations

from schema_marshal.core.params import count_positional_params, named_params


class TestCountPositionalParams:
    def test_counts_placeholders(self) -> None:
        assert count_positional_params("INSERT INTO t (a, b, c) VALUES (?, ?, ?)") == 3

    def test_no_params(self) -> None:
        assert count_positional_params("SELECT 1") == 0

    def test_string_literal_exclusion(self) -> None:
        sql = "SELECT * FROM t WHERE a = ? AND b = 'what?' AND c = ?"
        assert count_positional_params(sql) == 2

    def test_escaped_quote_in_literal(self) -> None:
        sql = r"SELECT * FROM t WHERE a = 'it\'s ?' AND b = ?"
        assert count_positional_params(sql) == 1

    def test_cache_returns_same_result(self) -> None:
        sql = "SELECT * FROM t WHERE id = ?"
        assert count_positional_params(sql) == count_positional_params(sql)


class TestNamedParams:
    def test_order_of_first_appearance(self) -> None:
        sql = "SELECT * FROM t WHERE b = :beta AND a = :alpha"
        assert named_params(sql) == ("beta", "alpha")

    def test_duplicate_param_names(self) -> None:
        sql = "SELECT * FROM t WHERE a = :val OR b = :val"
        assert named_params(sql) == ("val",)

    def test_typecast_exclusion(self) -> None:
        sql = "SELECT value::integer FROM t WHERE id = :id"
        assert named_params(sql) == ("id",)

    def test_string_literal_exclusion(self) -> None:
        sql = "SELECT * FROM t WHERE col = ':not_a_param' AND id = :id"
        assert named_params(sql) == ("id",)

    def test_underscore_in_param_name(self) -> None:
        sql = "SELECT * FROM t WHERE user_id = :user_id"
        assert named_params(sql) == ("user_id",)

    def test_no_params(self) -> None:
        assert named_params("SELECT 1") == ()
