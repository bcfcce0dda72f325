"""Tests for turning change records into statements."""

from __future__ import annotations

from seedwalk.graph.models import RawRow, Record
from seedwalk.models.config import Dialect, ExportConfig, OnDuplicate
from seedwalk.translate.translator import Translator, translate


def _chef(pk: int = 1, email: str = "nettofarah@gmail.com") -> Record:
    return Record("Chef", "chefs", "id", {"id": pk, "name": "Netto", "email": email})


def _join(recipe_id: int, tag_id: int) -> RawRow:
    return RawRow("recipes_tags", {"recipe_id": recipe_id, "tag_id": tag_id}, ("recipe_id", "tag_id"))


class TestTranslate:
    def test_empty_input(self) -> None:
        assert translate([]) == []

    def test_record_statement(self) -> None:
        assert translate([_chef()]) == [
            'INSERT INTO "chefs" ("id", "name", "email") VALUES (1, \'Netto\', \'nettofarah@gmail.com\');'
        ]

    def test_raw_row_statement(self) -> None:
        assert translate([_join(1, 2)]) == ['INSERT INTO "recipes_tags" ("recipe_id", "tag_id") VALUES (1, 2);']

    def test_order_is_preserved(self) -> None:
        statements = translate([_chef(2), _join(1, 1), _chef(1)])
        assert [s.split(" VALUES ")[1] for s in statements] == [
            "(2, 'Netto', 'nettofarah@gmail.com');",
            "(1, 1);",
            "(1, 'Netto', 'nettofarah@gmail.com');",
        ]

    def test_textual_duplicates_dropped_keeping_first(self) -> None:
        statements = translate([_join(1, 1), _chef(), _join(1, 1)])
        assert len(statements) == 2
        assert statements[0].startswith('INSERT INTO "recipes_tags"')

    def test_dialect_and_policy_from_config(self) -> None:
        config = ExportConfig(dialect=Dialect.MYSQL, on_duplicate=OnDuplicate.IGNORE)
        assert translate([_join(1, 2)], config) == [
            "INSERT INTO `recipes_tags` (`recipe_id`, `tag_id`) VALUES (1, 2) "
            "ON DUPLICATE KEY UPDATE `recipe_id` = `recipe_id`;"
        ]

    def test_record_override_targets_primary_key(self) -> None:
        config = ExportConfig(on_duplicate=OnDuplicate.OVERRIDE)
        statement = translate([_chef()], config)[0]
        assert 'ON CONFLICT ("id") DO UPDATE SET "name" = excluded."name"' in statement


class TestObfuscation:
    def test_only_records_are_obfuscated(self) -> None:
        config = ExportConfig(obfuscate={"recipe_id": lambda old: 99, "email": lambda old: "hidden"})
        statements = translate([_chef(), _join(1, 2)], config)
        assert "'hidden'" in statements[0]
        assert statements[1].endswith("VALUES (1, 2);")

    def test_obfuscation_mutates_the_record(self) -> None:
        chef = _chef()
        translate([chef], ExportConfig(obfuscate={"email": lambda old: "hidden"}))
        assert chef.get("email") == "hidden"

    def test_copies_leave_the_record_untouched(self) -> None:
        chef = _chef()
        translator = Translator(ExportConfig(obfuscate={"email": lambda old: "hidden"}))
        statements = translator.translate([chef, _join(1, 2)], in_place=False)
        assert "'hidden'" in statements[0]
        assert statements[1].endswith("VALUES (1, 2);")
        assert chef.get("email") == "nettofarah@gmail.com"

    def test_seeded_shuffle_is_deterministic(self) -> None:
        config = ExportConfig(obfuscate=["email"], obfuscation_seed=7)
        first = Translator(config).translate([_chef()])
        second = Translator(config).translate([_chef()])
        assert first == second
        assert sorted(first[0]) == sorted(translate([_chef()])[0])
