"""In-memory record provider.

Rows live in plain dicts keyed by table and primary key, in insertion order.
Every lookup returns fresh Record objects, the way a database would, so
obfuscating an exported record never alters the stored row.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from seedwalk.graph.models import Record, RelationDescriptor, RelationKind
from seedwalk.provider.base import chunked, distinct
from seedwalk.schema import ModelSpec, Schema


class MemoryProvider:
    """RecordProvider over rows held in memory."""

    def __init__(self, schema: Schema) -> None:
        self._schema = schema
        self._tables: dict[str, dict[Any, dict[str, Any]]] = {}
        self._join_tables: dict[str, list[dict[str, Any]]] = {}

    @property
    def schema(self) -> Schema:
        return self._schema

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def add(self, entity_type: str, **attributes: Any) -> Record:
        """Store one row for *entity_type*; the primary key must be present."""
        model = self._schema.model(entity_type)
        if attributes.get(model.primary_key) is None:
            raise ValueError(f"{entity_type} row is missing primary key {model.primary_key!r}")
        rows = self._tables.setdefault(model.table, {})
        rows[attributes[model.primary_key]] = dict(attributes)
        return self._record(model, attributes)

    def link(self, join_table: str, **columns: Any) -> None:
        """Store one join-table row, e.g. ``link("recipes_tags", recipe_id=1, tag_id=2)``."""
        self._join_tables.setdefault(join_table, []).append(dict(columns))

    def join_rows(self, join_table: str) -> list[dict[str, Any]]:
        return [dict(row) for row in self._join_tables.get(join_table, [])]

    # ------------------------------------------------------------------
    # RecordProvider
    # ------------------------------------------------------------------

    def get(self, entity_type: str, pk: Any) -> Record | None:
        model = self._schema.model(entity_type)
        row = self._tables.get(model.table, {}).get(pk)
        return self._record(model, row) if row is not None else None

    def fetch(self, entity_type: str, ids: Sequence[Any]) -> list[Record]:
        model = self._schema.model(entity_type)
        rows = self._tables.get(model.table, {})
        return [self._record(model, rows[pk]) for pk in distinct(ids) if pk in rows]

    def iter_pages(
        self,
        entity_type: str,
        ids: Sequence[Any] | None,
        batch_size: int | None,
    ) -> Iterator[list[Record]]:
        model = self._schema.model(entity_type)
        if ids is None:
            rows = list(self._tables.get(model.table, {}).values())
            for page in chunked(rows, batch_size):
                yield [self._record(model, row) for row in page]
            return
        for id_page in chunked(list(ids), batch_size):
            yield self.fetch(entity_type, id_page)

    def related(self, record: Record, descriptor: RelationDescriptor) -> Record | None:
        assert descriptor.target is not None
        if descriptor.kind is RelationKind.TO_ONE_DIRECT:
            fk = record.get(descriptor.foreign_key or "")
            return self.get(descriptor.target, fk) if fk is not None else None
        if descriptor.kind is RelationKind.TO_ONE_REVERSE:
            return next(iter(self._rows_referencing(record, descriptor)), None)
        raise ValueError(f"{descriptor.owner}.{descriptor.name} ({descriptor.kind}) is not a to-one relation")

    def iter_related(
        self,
        record: Record,
        descriptor: RelationDescriptor,
        batch_size: int | None,
    ) -> Iterator[list[Record]]:
        assert descriptor.target is not None
        if descriptor.kind.is_to_one and not descriptor.kind.is_through:
            related = self.related(record, descriptor)
            if related is not None:
                yield [related]
            return
        if descriptor.kind is RelationKind.TO_MANY_DIRECT:
            yield from chunked(self._rows_referencing(record, descriptor), batch_size)
            return
        if descriptor.kind is RelationKind.TO_MANY_JOIN:
            target_ids = [
                row.get(descriptor.join_association_key or "")
                for row in self._join_tables.get(descriptor.join_table or "", [])
                if row.get(descriptor.join_foreign_key or "") == record.pk
            ]
            for id_page in chunked(distinct(target_ids), batch_size):
                yield self.fetch(descriptor.target, id_page)
            return
        raise ValueError(f"{descriptor.owner}.{descriptor.name} ({descriptor.kind}) must be walked via its parts")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _rows_referencing(self, record: Record, descriptor: RelationDescriptor) -> list[Record]:
        assert descriptor.target is not None
        model = self._schema.model(descriptor.target)
        column = descriptor.foreign_key or ""
        return [
            self._record(model, row)
            for row in self._tables.get(model.table, {}).values()
            if row.get(column) == record.pk
        ]

    @staticmethod
    def _record(model: ModelSpec, row: dict[str, Any]) -> Record:
        return Record(
            entity_type=model.name,
            table=model.table,
            primary_key=model.primary_key,
            attributes=dict(row),
        )
