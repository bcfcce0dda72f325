"""Record providers.

The walker only depends on the RecordProvider and RelationResolver
protocols in ``base``.  Two providers ship with seedwalk:

    memory -- MemoryProvider, rows held in dicts (tests, programmatic use).
    sqlite -- SqliteProvider, rows read from a sqlite3 database.
"""

from seedwalk.provider.base import ProviderError, RecordProvider, RelationResolver
from seedwalk.provider.memory import MemoryProvider
from seedwalk.provider.sqlite import SqliteProvider

__all__ = [
    "MemoryProvider",
    "ProviderError",
    "RecordProvider",
    "RelationResolver",
    "SqliteProvider",
]
