"""Shared fixtures for seedwalk tests.

Provides a small kitchen schema that exercises every relation kind, a
MemoryProvider populated with realistic rows, and a matching SQLite file
so unit and integration tests can run full exports without any external
database.
"""

from __future__ import annotations

import sqlite3
from decimal import Decimal
from pathlib import Path

import pytest
import structlog

from seedwalk.provider.memory import MemoryProvider
from seedwalk.schema import Schema

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _silent_logging() -> None:
    """Route structlog to a logger that writes nothing.

    Keeps captured stdout clean for CLI tests and avoids cached loggers
    bound to streams that a test runner later closes.
    """
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


def build_kitchen_schema() -> Schema:
    """Chefs, their recipes, tags (join table), ingredients (through) and more.

    Relation kinds covered:
        Chef.restaurant          -- to-one direct
        Chef.profile             -- to-one reverse
        Chef.city                -- to-one through restaurant
        Chef.recipes             -- to-many direct
        Recipe.tags              -- to-many join (recipes_tags)
        Recipe.ingredients       -- to-many through recipe_ingredients
    """
    schema = Schema()
    (
        schema.define("Chef", "chefs")
        .belongs_to("restaurant", "Restaurant")
        .has_one("profile", "Profile")
        .has_one_through("city", through="restaurant", source="city")
        .has_many("recipes", "Recipe")
    )
    (
        schema.define("Recipe", "recipes")
        .belongs_to("chef", "Chef")
        .has_and_belongs_to_many("tags", "Tag")
        .has_many("recipe_ingredients", "RecipeIngredient")
        .has_many_through("ingredients", through="recipe_ingredients", source="ingredient")
    )
    schema.define("RecipeIngredient", "recipe_ingredients").belongs_to("ingredient", "Ingredient")
    schema.define("Ingredient", "ingredients")
    schema.define("Tag", "tags").has_and_belongs_to_many("recipes", "Recipe")
    schema.define("Profile", "profiles").belongs_to("chef", "Chef")
    schema.define("Restaurant", "restaurants").belongs_to("city", "City").has_many("chefs", "Chef")
    schema.define("City", "cities")
    return schema


# Rows shared by the memory and SQLite fixtures.
KITCHEN_ROWS: dict[str, list[dict[str, object]]] = {
    "City": [{"id": 1, "name": "Lisbon"}],
    "Restaurant": [{"id": 1, "name": "Tasca", "city_id": 1}],
    "Chef": [
        {"id": 1, "name": "Netto", "email": "nettofarah@gmail.com", "restaurant_id": 1},
        {"id": 2, "name": "Ana", "email": "ana@example.com", "restaurant_id": 1},
        {"id": 3, "name": "Solo", "email": "solo@example.com", "restaurant_id": None},
    ],
    "Profile": [{"id": 1, "chef_id": 1, "bio": "Loves tea"}],
    "Recipe": [
        {"id": 1, "title": "Turkey Sandwich", "chef_id": 1},
        {"id": 2, "title": "Cheese Burger", "chef_id": 1},
        {"id": 3, "title": "Salad", "chef_id": 2},
    ],
    "Tag": [
        {"id": 1, "name": "sandwich"},
        {"id": 2, "name": "shared"},
        {"id": 3, "name": "veggie"},
    ],
    "Ingredient": [
        {"id": 1, "name": "Turkey", "price": Decimal("12.3456789012345678")},
        {"id": 2, "name": "Cheese", "price": Decimal("3.50")},
        {"id": 3, "name": "Bread", "price": Decimal("1.25")},
    ],
    "RecipeIngredient": [
        {"id": 1, "recipe_id": 1, "ingredient_id": 1, "quantity": "2 slices"},
        {"id": 2, "recipe_id": 1, "ingredient_id": 3, "quantity": "2"},
        {"id": 3, "recipe_id": 2, "ingredient_id": 2, "quantity": "1 slice"},
        {"id": 4, "recipe_id": 2, "ingredient_id": 3, "quantity": "1"},
    ],
}

KITCHEN_LINKS: list[tuple[int, int]] = [(1, 1), (1, 2), (2, 2), (3, 2), (3, 3)]


def build_kitchen_provider(schema: Schema | None = None) -> MemoryProvider:
    provider = MemoryProvider(schema or build_kitchen_schema())
    for entity_type, rows in KITCHEN_ROWS.items():
        for row in rows:
            provider.add(entity_type, **row)
    for recipe_id, tag_id in KITCHEN_LINKS:
        provider.link("recipes_tags", recipe_id=recipe_id, tag_id=tag_id)
    return provider


_KITCHEN_DDL = """
CREATE TABLE cities (id INTEGER PRIMARY KEY, name TEXT);
CREATE TABLE restaurants (id INTEGER PRIMARY KEY, name TEXT, city_id INTEGER);
CREATE TABLE chefs (id INTEGER PRIMARY KEY, name TEXT, email TEXT, restaurant_id INTEGER);
CREATE TABLE profiles (id INTEGER PRIMARY KEY, chef_id INTEGER, bio TEXT);
CREATE TABLE recipes (id INTEGER PRIMARY KEY, title TEXT, chef_id INTEGER);
CREATE TABLE tags (id INTEGER PRIMARY KEY, name TEXT);
CREATE TABLE ingredients (id INTEGER PRIMARY KEY, name TEXT, price TEXT);
CREATE TABLE recipe_ingredients (id INTEGER PRIMARY KEY, recipe_id INTEGER, ingredient_id INTEGER, quantity TEXT);
CREATE TABLE recipes_tags (recipe_id INTEGER, tag_id INTEGER);
"""


def build_kitchen_database(path: Path) -> Path:
    """Write the kitchen rows into a fresh SQLite file at *path*."""
    schema = build_kitchen_schema()
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(_KITCHEN_DDL)
        for entity_type, rows in KITCHEN_ROWS.items():
            table = schema.model(entity_type).table
            for row in rows:
                columns = ", ".join(row)
                placeholders = ", ".join("?" for _ in row)
                values = [str(v) if isinstance(v, Decimal) else v for v in row.values()]
                conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", values)
        conn.executemany("INSERT INTO recipes_tags (recipe_id, tag_id) VALUES (?, ?)", KITCHEN_LINKS)
        conn.commit()
    finally:
        conn.close()
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def kitchen_schema() -> Schema:
    return build_kitchen_schema()


@pytest.fixture()
def kitchen(kitchen_schema: Schema) -> MemoryProvider:
    """MemoryProvider pre-populated with the kitchen rows."""
    return build_kitchen_provider(kitchen_schema)


@pytest.fixture()
def kitchen_db(tmp_path: Path) -> Path:
    """SQLite file holding the kitchen rows."""
    return build_kitchen_database(tmp_path / "kitchen.db")
