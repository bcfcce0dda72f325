"""Record provider backed by a sqlite3 database.

Queries are parameterized and ordered by primary key so repeated exports
of an unchanged database emit statements in the same order.  Pages are
read from an open cursor with ``fetchmany``; closing the page iterator
closes the cursor.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from seedwalk.graph.models import Record, RelationDescriptor, RelationKind
from seedwalk.observability.logging import get_logger
from seedwalk.provider.base import ProviderError, chunked, distinct
from seedwalk.schema import ModelSpec, Schema

_logger = get_logger("provider.sqlite")

# Stay well below SQLITE_MAX_VARIABLE_NUMBER on older builds.
_MAX_PARAMS = 500


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


@contextmanager
def _errors(operation: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        _logger.error("provider_query_failed", operation=operation, error=str(exc))
        raise ProviderError(operation, exc) from exc


class SqliteProvider:
    """RecordProvider reading rows from a sqlite3 connection."""

    def __init__(self, connection: sqlite3.Connection, schema: Schema) -> None:
        self._conn = connection
        self._schema = schema

    @classmethod
    def open(cls, path: Path, schema: Schema) -> SqliteProvider:
        """Open *path* read-only."""
        resolved = Path(path)
        if not resolved.exists():
            raise FileNotFoundError(f"Database not found: {resolved}")
        with _errors("connect"):
            conn = sqlite3.connect(f"file:{resolved}?mode=ro", uri=True)
        return cls(conn, schema)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SqliteProvider:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # RecordProvider
    # ------------------------------------------------------------------

    def get(self, entity_type: str, pk: Any) -> Record | None:
        model = self._schema.model(entity_type)
        sql = f"SELECT * FROM {_quote(model.table)} WHERE {_quote(model.primary_key)} = ?"
        with _errors(f"get {entity_type}"):
            cursor = self._conn.execute(sql, (pk,))
            try:
                row = cursor.fetchone()
                return self._record(model, cursor, row) if row is not None else None
            finally:
                cursor.close()

    def fetch(self, entity_type: str, ids: Sequence[Any]) -> list[Record]:
        model = self._schema.model(entity_type)
        records: list[Record] = []
        for id_chunk in chunked(distinct(ids), _MAX_PARAMS):
            placeholders = ", ".join("?" for _ in id_chunk)
            sql = (
                f"SELECT * FROM {_quote(model.table)} "
                f"WHERE {_quote(model.primary_key)} IN ({placeholders}) "
                f"ORDER BY {_quote(model.primary_key)}"
            )
            for page in self._pages(f"fetch {entity_type}", model, sql, id_chunk, None):
                records.extend(page)
        return records

    def iter_pages(
        self,
        entity_type: str,
        ids: Sequence[Any] | None,
        batch_size: int | None,
    ) -> Iterator[list[Record]]:
        model = self._schema.model(entity_type)
        if ids is None:
            sql = f"SELECT * FROM {_quote(model.table)} ORDER BY {_quote(model.primary_key)}"
            yield from self._pages(f"scan {entity_type}", model, sql, (), batch_size)
            return
        for id_page in chunked(list(ids), batch_size):
            yield self.fetch(entity_type, id_page)

    def related(self, record: Record, descriptor: RelationDescriptor) -> Record | None:
        assert descriptor.target is not None
        if descriptor.kind is RelationKind.TO_ONE_DIRECT:
            fk = record.get(descriptor.foreign_key or "")
            return self.get(descriptor.target, fk) if fk is not None else None
        if descriptor.kind is RelationKind.TO_ONE_REVERSE:
            model = self._schema.model(descriptor.target)
            sql = (
                f"SELECT * FROM {_quote(model.table)} "
                f"WHERE {_quote(descriptor.foreign_key or '')} = ? "
                f"ORDER BY {_quote(model.primary_key)} LIMIT 1"
            )
            for page in self._pages(f"related {descriptor.name}", model, sql, (record.pk,), None):
                return page[0]
            return None
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

        model = self._schema.model(descriptor.target)
        table = _quote(model.table)
        pk = _quote(model.primary_key)
        if descriptor.kind is RelationKind.TO_MANY_DIRECT:
            sql = f"SELECT * FROM {table} WHERE {_quote(descriptor.foreign_key or '')} = ? ORDER BY {pk}"
        elif descriptor.kind is RelationKind.TO_MANY_JOIN:
            join = _quote(descriptor.join_table or "")
            sql = (
                f"SELECT DISTINCT t.* FROM {table} AS t "
                f"JOIN {join} AS j ON j.{_quote(descriptor.join_association_key or '')} = t.{pk} "
                f"WHERE j.{_quote(descriptor.join_foreign_key or '')} = ? "
                f"ORDER BY t.{pk}"
            )
        else:
            raise ValueError(f"{descriptor.owner}.{descriptor.name} ({descriptor.kind}) must be walked via its parts")
        yield from self._pages(f"related {descriptor.name}", model, sql, (record.pk,), batch_size)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _pages(
        self,
        operation: str,
        model: ModelSpec,
        sql: str,
        params: Sequence[Any],
        batch_size: int | None,
    ) -> Iterator[list[Record]]:
        with _errors(operation):
            cursor = self._conn.execute(sql, tuple(params))
        try:
            while True:
                with _errors(operation):
                    rows = cursor.fetchall() if batch_size is None else cursor.fetchmany(batch_size)
                if not rows:
                    return
                yield [self._record(model, cursor, row) for row in rows]
                if batch_size is None:
                    return
        finally:
            cursor.close()

    @staticmethod
    def _record(model: ModelSpec, cursor: sqlite3.Cursor, row: Sequence[Any]) -> Record:
        columns = [description[0] for description in cursor.description]
        return Record(
            entity_type=model.name,
            table=model.table,
            primary_key=model.primary_key,
            attributes=dict(zip(columns, row)),
        )
