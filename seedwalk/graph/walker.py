"""Graph walker: batch-bounded traversal of a relation tree over records.

The walker yields batches of newly discovered change records in discovery
order: each root first, then every relation of the tree in declared order,
depth first through a relation's nested tree before moving to the next name.

Memory stays proportional to one page of siblings per tree level for
to-many relations.  The seen set grows with the number of distinct
identities visited, which is what guarantees no duplicate emission.

To-one relations always produce singleton batches, whatever the batch size.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from seedwalk.graph.models import (
    Batch,
    JoinKey,
    Record,
    RelationDescriptor,
    RelationKind,
)
from seedwalk.graph.seen import SeenSet
from seedwalk.graph.tree import RelationTree
from seedwalk.observability.logging import get_logger
from seedwalk.observability.metrics import join_rows_total, records_discovered_total
from seedwalk.provider.base import RecordProvider, RelationResolver, distinct

_logger = get_logger("graph.walker")

_Handler = Callable[[Record, RelationDescriptor, RelationTree], Iterator[Batch]]


@contextmanager
def _paged(pages: Iterable[list[Record]]) -> Iterator[Iterable[list[Record]]]:
    """Close a provider's page iterator even when the walk is abandoned."""
    try:
        yield pages
    finally:
        close = getattr(pages, "close", None)
        if close is not None:
            close()


class GraphWalker:
    """Traverses records along a normalized relation tree.

    One walker instance serves one export call: its seen set and its
    descriptor cache are both scoped to that call.
    """

    def __init__(
        self,
        provider: RecordProvider,
        resolver: RelationResolver,
        seen: SeenSet | None = None,
        batch_size: int | None = 1000,
    ) -> None:
        if batch_size is not None and batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._provider = provider
        self._resolver = resolver
        self._seen = seen if seen is not None else SeenSet()
        self._batch_size = batch_size
        self._descriptors: dict[tuple[str, str], RelationDescriptor | None] = {}
        self._handlers: dict[RelationKind, _Handler] = {
            RelationKind.TO_ONE_DIRECT: self._walk_to_one,
            RelationKind.TO_ONE_REVERSE: self._walk_to_one,
            RelationKind.TO_ONE_THROUGH: self._walk_to_one_through,
            RelationKind.TO_MANY_DIRECT: self._walk_to_many,
            RelationKind.TO_MANY_THROUGH: self._walk_to_many_through,
            RelationKind.TO_MANY_JOIN: self._walk_to_many_join,
        }

    @property
    def seen(self) -> SeenSet:
        return self._seen

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def walk_roots(self, root_type: str, ids: Any, tree: RelationTree) -> Iterator[Batch]:
        """Yield batches for every root of *root_type* and its relation tree.

        *ids* may be None (every record of the type), a single id, or any
        iterable of ids (list, set, generator, dict keys).  Roots already
        seen, including repeats within the ids, are skipped along with
        their subtrees.
        """
        if ids is None or _is_id_collection(ids):
            id_list = None if ids is None else list(ids)
            if id_list == []:
                return
            with _paged(self._provider.iter_pages(root_type, id_list, self._batch_size)) as pages:
                for page in pages:
                    for root in page:
                        yield from self._walk_root(root, tree)
            return

        root = self._provider.get(root_type, ids)
        if root is not None:
            yield from self._walk_root(root, tree)

    def walk(self, record: Record, tree: RelationTree) -> Iterator[Batch]:
        """Yield batches for each relation of *tree* on *record*, in order."""
        for name, nested in tree.items():
            descriptor = self._descriptor(record.entity_type, name)
            if descriptor is None:
                _logger.debug("relation_skipped", entity_type=record.entity_type, relation=name, reason="unknown")
                continue
            yield from self._handlers[descriptor.kind](record, descriptor, nested)

    # ------------------------------------------------------------------
    # Relation kinds
    # ------------------------------------------------------------------

    def _walk_root(self, root: Record, tree: RelationTree) -> Iterator[Batch]:
        if not self._claim(root):
            return
        yield [root]
        yield from self.walk(root, tree)

    def _walk_to_one(self, record: Record, descriptor: RelationDescriptor, nested: RelationTree) -> Iterator[Batch]:
        related = self._provider.related(record, descriptor)
        if related is None or not self._claim(related):
            return
        yield [related]
        if nested:
            yield from self.walk(related, nested)

    def _walk_to_one_through(
        self, record: Record, descriptor: RelationDescriptor, nested: RelationTree
    ) -> Iterator[Batch]:
        parts = self._through_parts(record, descriptor)
        if parts is None:
            return
        through, source = parts

        intermediate = self._provider.related(record, through)
        if intermediate is None:
            return
        if self._claim(intermediate):
            yield [intermediate]

        target = self._provider.related(intermediate, source)
        if target is None or not self._claim(target):
            return
        yield [target]
        if nested:
            yield from self.walk(target, nested)

    def _walk_to_many(self, record: Record, descriptor: RelationDescriptor, nested: RelationTree) -> Iterator[Batch]:
        with _paged(self._provider.iter_related(record, descriptor, self._batch_size)) as pages:
            for page in pages:
                fresh = self._claim_all(page)
                if not fresh:
                    continue
                yield fresh
                if nested:
                    for child in fresh:
                        yield from self.walk(child, nested)

    def _walk_to_many_through(
        self, record: Record, descriptor: RelationDescriptor, nested: RelationTree
    ) -> Iterator[Batch]:
        parts = self._through_parts(record, descriptor)
        if parts is None:
            return
        through, source = parts
        if source.kind is not RelationKind.TO_ONE_DIRECT or not source.target or not source.foreign_key:
            _logger.debug(
                "relation_skipped",
                entity_type=record.entity_type,
                relation=descriptor.name,
                reason="source_not_direct",
            )
            return

        with _paged(self._provider.iter_related(record, through, self._batch_size)) as pages:
            for page in pages:
                fresh_through = self._claim_all(page)
                if fresh_through:
                    yield fresh_through

                target_ids = distinct([row.get(source.foreign_key) for row in page])
                if not target_ids:
                    continue
                fresh = self._claim_all(self._provider.fetch(source.target, target_ids))
                if not fresh:
                    continue
                yield fresh
                if nested:
                    for target in fresh:
                        yield from self.walk(target, nested)

    def _walk_to_many_join(
        self, record: Record, descriptor: RelationDescriptor, nested: RelationTree
    ) -> Iterator[Batch]:
        join_table = descriptor.join_table
        fk = descriptor.join_foreign_key
        association_key = descriptor.join_association_key
        if not (join_table and fk and association_key):
            _logger.debug(
                "relation_skipped",
                entity_type=record.entity_type,
                relation=descriptor.name,
                reason="join_metadata_missing",
            )
            return

        source_id = record.pk
        with _paged(self._provider.iter_related(record, descriptor, self._batch_size)) as pages:
            for page in pages:
                fresh = self._claim_all(page)
                if fresh:
                    yield fresh

                join_rows: Batch = []
                for related in page:
                    key = JoinKey.of(join_table, {fk: source_id, association_key: related.pk})
                    if self._seen.add(key):
                        join_rows.append(key.row())
                if join_rows:
                    join_rows_total.labels(join_table=join_table).inc(len(join_rows))
                    yield join_rows

                if nested:
                    for child in fresh:
                        yield from self.walk(child, nested)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _descriptor(self, entity_type: str, name: str) -> RelationDescriptor | None:
        key = (entity_type, name)
        if key not in self._descriptors:
            self._descriptors[key] = self._resolver.resolve(entity_type, name)
        return self._descriptors[key]

    def _through_parts(
        self, record: Record, descriptor: RelationDescriptor
    ) -> tuple[RelationDescriptor, RelationDescriptor] | None:
        through = self._descriptor(record.entity_type, descriptor.through) if descriptor.through else None
        source = None
        if through is not None and through.target and not through.kind.is_through and descriptor.source:
            source = self._descriptor(through.target, descriptor.source)
        # A through relation must end in a plain to-one hop on the intermediate.
        if through is None or source is None or source.kind.is_through or not source.kind.is_to_one:
            _logger.debug(
                "relation_skipped",
                entity_type=record.entity_type,
                relation=descriptor.name,
                reason="through_metadata_missing",
            )
            return None
        return through, source

    def _claim(self, record: Record) -> bool:
        if not self._seen.mark(record):
            return False
        records_discovered_total.labels(entity_type=record.entity_type).inc()
        return True

    def _claim_all(self, records: Iterable[Record]) -> list[Record]:
        return [record for record in records if self._claim(record)]


def _is_id_collection(ids: Any) -> bool:
    return isinstance(ids, Iterable) and not isinstance(ids, (str, bytes, bytearray))
