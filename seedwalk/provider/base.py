"""Interfaces the graph walker depends on.

RecordProvider   -- fetches records by id and follows single relations.
RelationResolver -- maps (entity_type, relation name) to a RelationDescriptor.

Providers never deduplicate; the walker's seen set does.  Any exception a
provider raises aborts the export call that triggered it.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Protocol, TypeVar

from seedwalk.graph.models import Record, RelationDescriptor

T = TypeVar("T")


class ProviderError(Exception):
    """Raised when a bundled record provider fails to read from its store."""

    def __init__(self, operation: str, cause: Exception) -> None:
        super().__init__(f"Record provider failed during {operation}: {cause}")
        self.operation = operation
        self.cause = cause


class RelationResolver(Protocol):
    def resolve(self, entity_type: str, name: str) -> RelationDescriptor | None:
        """Return metadata for *name* on *entity_type*, or None if absent."""
        ...


class RecordProvider(Protocol):
    def get(self, entity_type: str, pk: Any) -> Record | None:
        """Point lookup by primary key."""
        ...

    def fetch(self, entity_type: str, ids: Sequence[Any]) -> list[Record]:
        """Every existing record among *ids*, in one call."""
        ...

    def iter_pages(
        self,
        entity_type: str,
        ids: Sequence[Any] | None,
        batch_size: int | None,
    ) -> Iterator[list[Record]]:
        """Page through records of *entity_type*.

        ``ids=None`` pages through every record of the type.  ``batch_size``
        of None returns everything in a single page.
        """
        ...

    def related(self, record: Record, descriptor: RelationDescriptor) -> Record | None:
        """Follow a to-one direct or reverse relation."""
        ...

    def iter_related(
        self,
        record: Record,
        descriptor: RelationDescriptor,
        batch_size: int | None,
    ) -> Iterator[list[Record]]:
        """Page through the targets of a direct, reverse or join relation."""
        ...


def chunked(items: Sequence[T], size: int | None) -> Iterator[list[T]]:
    """Split *items* into lists of at most *size*; None means one chunk."""
    if not items:
        return
    if size is None:
        yield list(items)
        return
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def distinct(values: Sequence[Any]) -> list[Any]:
    """Drop None and repeated values, keeping first-seen order."""
    return [value for value in dict.fromkeys(values) if value is not None]
