"""Per-call deduplication state for a traversal."""

from __future__ import annotations

from collections.abc import Iterable

from seedwalk.graph.models import EntityKey, JoinKey, Record

SeenKey = EntityKey | JoinKey


class SeenSet:
    """Identities already emitted during one export call.

    Keys are only ever added.  A fresh instance must back every top-level
    call; sharing one across calls would suppress records the second call
    has not emitted yet.
    """

    def __init__(self) -> None:
        self._keys: set[SeenKey] = set()
        self._entities = 0
        self._joins = 0

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def entity_count(self) -> int:
        return self._entities

    @property
    def join_count(self) -> int:
        return self._joins

    def add(self, key: SeenKey) -> bool:
        """Insert *key*; return False if it was already present."""
        if key in self._keys:
            return False
        self._keys.add(key)
        if isinstance(key, JoinKey):
            self._joins += 1
        else:
            self._entities += 1
        return True

    def seen(self, record: Record) -> bool:
        return record.key in self._keys

    def mark(self, record: Record) -> bool:
        return self.add(record.key)

    def claim(self, records: Iterable[Record]) -> list[Record]:
        """Mark every unseen record and return those, in input order."""
        return [record for record in records if self.add(record.key)]
