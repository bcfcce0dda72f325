"""Tests for literal rendering and INSERT statement assembly."""

from __future__ import annotations

import math
from datetime import date, datetime, time
from decimal import Decimal

import pytest

from seedwalk.models.config import Dialect, OnDuplicate
from seedwalk.translate.sql import LiteralRenderer, insert_statement, on_duplicate_clause

SQLITE = LiteralRenderer(Dialect.SQLITE)
POSTGRES = LiteralRenderer(Dialect.POSTGRES)
MYSQL = LiteralRenderer(Dialect.MYSQL)


class TestIdentifiers:
    def test_double_quotes_by_default(self) -> None:
        assert SQLITE.quote_identifier("chefs") == '"chefs"'
        assert POSTGRES.quote_identifier('we"ird') == '"we""ird"'

    def test_backticks_for_mysql(self) -> None:
        assert MYSQL.quote_identifier("chefs") == "`chefs`"
        assert MYSQL.quote_identifier("a`b") == "`a``b`"

    def test_dialect_accepts_plain_string(self) -> None:
        assert LiteralRenderer("mysql").dialect is Dialect.MYSQL  # type: ignore[arg-type]


class TestLiterals:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "NULL"),
            (42, "42"),
            (-7, "-7"),
            (1.5, "1.5"),
            ("Netto", "'Netto'"),
            ("O'Brien", "'O''Brien'"),
            ("", "''"),
            (date(2024, 2, 29), "'2024-02-29'"),
            (time(13, 5, 0), "'13:05:00'"),
            (datetime(2024, 1, 2, 3, 4, 5), "'2024-01-02 03:04:05'"),
            (b"\x00\xff", "X'00ff'"),
            ({"b": 1, "a": [1, 2]}, '\'{"a": [1, 2], "b": 1}\''),
        ],
    )
    def test_sqlite_literals(self, value, expected) -> None:
        assert SQLITE.render("t", "c", value) == expected

    def test_booleans_per_dialect(self) -> None:
        assert SQLITE.render("t", "c", True) == "1"
        assert SQLITE.render("t", "c", False) == "0"
        assert POSTGRES.render("t", "c", True) == "TRUE"
        assert MYSQL.render("t", "c", False) == "FALSE"

    def test_decimal_keeps_every_digit(self) -> None:
        assert SQLITE.render("ingredients", "price", Decimal("12.3456789012345678")) == "12.3456789012345678"

    def test_decimal_never_uses_exponent(self) -> None:
        assert SQLITE.render("t", "c", Decimal("1E+3")) == "1000"
        assert SQLITE.render("t", "c", Decimal("1.50")) == "1.50"

    def test_non_finite_values_are_quoted(self) -> None:
        assert SQLITE.render("t", "c", math.inf) == "'inf'"
        assert SQLITE.render("t", "c", Decimal("NaN")) == "'NaN'"

    def test_postgres_bytea(self) -> None:
        assert POSTGRES.render("t", "c", b"\x01\x02") == "'\\x0102'::bytea"

    def test_mysql_escapes_backslashes(self) -> None:
        assert MYSQL.render("t", "c", "a\\b") == "'a\\\\b'"
        assert SQLITE.render("t", "c", "a\\b") == "'a\\b'"

    def test_other_values_fall_back_to_text(self) -> None:
        class Money:
            def __str__(self) -> str:
                return "EUR 3"

        assert SQLITE.render("t", "c", Money()) == "'EUR 3'"


class TestOnDuplicate:
    def test_fail_adds_nothing(self) -> None:
        assert on_duplicate_clause(SQLITE, ["id", "name"], ["id"], OnDuplicate.FAIL) == ""

    def test_ignore_on_sqlite_and_postgres(self) -> None:
        for renderer in (SQLITE, POSTGRES):
            assert on_duplicate_clause(renderer, ["id", "name"], ["id"], OnDuplicate.IGNORE) == (
                "ON CONFLICT DO NOTHING"
            )

    def test_override_on_postgres(self) -> None:
        clause = on_duplicate_clause(POSTGRES, ["id", "name", "email"], ["id"], OnDuplicate.OVERRIDE)
        assert clause == 'ON CONFLICT ("id") DO UPDATE SET "name" = excluded."name", "email" = excluded."email"'

    def test_override_with_only_key_columns(self) -> None:
        clause = on_duplicate_clause(SQLITE, ["recipe_id", "tag_id"], ["recipe_id", "tag_id"], "override")
        assert clause == 'ON CONFLICT ("recipe_id", "tag_id") DO NOTHING'

    def test_override_without_keys_raises(self) -> None:
        with pytest.raises(ValueError, match="key columns"):
            on_duplicate_clause(SQLITE, ["a"], [], OnDuplicate.OVERRIDE)

    def test_mysql_ignore(self) -> None:
        assert on_duplicate_clause(MYSQL, ["id", "name"], ["id"], OnDuplicate.IGNORE) == (
            "ON DUPLICATE KEY UPDATE `id` = `id`"
        )

    def test_mysql_override(self) -> None:
        assert on_duplicate_clause(MYSQL, ["id", "name"], ["id"], OnDuplicate.OVERRIDE) == (
            "ON DUPLICATE KEY UPDATE `id` = VALUES(`id`), `name` = VALUES(`name`)"
        )


class TestInsertStatement:
    def test_plain_insert(self) -> None:
        statement = insert_statement(
            SQLITE, "chefs", {"id": 1, "name": "Netto", "email": "nettofarah@gmail.com"}, ("id",)
        )
        assert statement == 'INSERT INTO "chefs" ("id", "name", "email") VALUES (1, \'Netto\', \'nettofarah@gmail.com\');'

    def test_column_order_follows_values(self) -> None:
        statement = insert_statement(SQLITE, "tags", {"name": "shared", "id": 2})
        assert statement == 'INSERT INTO "tags" ("name", "id") VALUES (\'shared\', 2);'

    def test_null_columns_are_kept(self) -> None:
        statement = insert_statement(SQLITE, "chefs", {"id": 3, "restaurant_id": None})
        assert statement.endswith("VALUES (3, NULL);")

    def test_clause_is_appended(self) -> None:
        statement = insert_statement(POSTGRES, "tags", {"id": 1}, ("id",), OnDuplicate.IGNORE)
        assert statement == 'INSERT INTO "tags" ("id") VALUES (1) ON CONFLICT DO NOTHING;'

    def test_empty_values_rejected(self) -> None:
        with pytest.raises(ValueError, match="without columns"):
            insert_statement(SQLITE, "tags", {})
