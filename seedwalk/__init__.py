"""seedwalk: export a seed-rooted slice of a relational dataset as INSERT statements.

    schema = Schema()
    schema.define("Chef", "chefs").has_many("recipes", "Recipe")
    schema.define("Recipe", "recipes")
    provider = SqliteProvider.open(Path("app.db"), schema)

    statements = explore(provider, schema, "Chef", 1, "recipes")
"""

from seedwalk.explore import Exporter, collect, explore, explore_stream, iter_stream
from seedwalk.models.config import Dialect, ExportConfig, OnDuplicate
from seedwalk.provider import MemoryProvider, ProviderError, SqliteProvider
from seedwalk.schema import Schema, UnknownEntityError

__version__ = "0.3.0"

__all__ = [
    "Dialect",
    "ExportConfig",
    "Exporter",
    "MemoryProvider",
    "OnDuplicate",
    "ProviderError",
    "Schema",
    "SqliteProvider",
    "UnknownEntityError",
    "__version__",
    "collect",
    "explore",
    "explore_stream",
    "iter_stream",
]
