"""Data structures for the record graph: identities, relations and rows."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class RelationKind(StrEnum):
    """Ways one record reaches its related records."""

    TO_ONE_DIRECT = "to_one_direct"  # foreign key lives on the source row
    TO_ONE_REVERSE = "to_one_reverse"  # foreign key lives on the target row
    TO_ONE_THROUGH = "to_one_through"
    TO_MANY_DIRECT = "to_many_direct"
    TO_MANY_THROUGH = "to_many_through"
    TO_MANY_JOIN = "to_many_join"

    @property
    def is_to_one(self) -> bool:
        return self in (
            RelationKind.TO_ONE_DIRECT,
            RelationKind.TO_ONE_REVERSE,
            RelationKind.TO_ONE_THROUGH,
        )

    @property
    def is_through(self) -> bool:
        return self in (RelationKind.TO_ONE_THROUGH, RelationKind.TO_MANY_THROUGH)


@dataclass(frozen=True)
class EntityKey:
    """Identity of one stored entity."""

    entity_type: str
    pk: Any


@dataclass(frozen=True)
class JoinKey:
    """Identity of one synthesized join-table row.

    ``columns`` holds ``(column, value)`` pairs sorted by column name, so a
    row reached from either side of the join has the same key.
    """

    join_table: str
    columns: tuple[tuple[str, Any], ...]

    @classmethod
    def of(cls, join_table: str, values: Mapping[str, Any]) -> JoinKey:
        return cls(join_table, tuple(sorted(values.items(), key=lambda pair: pair[0])))

    def row(self) -> RawRow:
        """The join-table row this key identifies, columns in key order."""
        return RawRow(
            table=self.join_table,
            values=dict(self.columns),
            key_columns=tuple(column for column, _ in self.columns),
        )


@dataclass(frozen=True)
class RelationDescriptor:
    """Resolved metadata for following one named relation of an entity type.

    Only the fields relevant to ``kind`` are populated:

    - direct / reverse kinds: ``target`` and ``foreign_key``
    - through kinds: ``through`` and ``source`` (relation names), plus
      ``target`` when the schema can derive it
    - join kind: ``target``, ``join_table``, ``join_foreign_key`` (column
      pointing at the source record) and ``join_association_key`` (column
      pointing at the target record)
    """

    name: str
    kind: RelationKind
    owner: str
    target: str | None = None
    foreign_key: str | None = None
    through: str | None = None
    source: str | None = None
    join_table: str | None = None
    join_foreign_key: str | None = None
    join_association_key: str | None = None


@dataclass(eq=False)
class Record:
    """One stored entity: an ordered attribute map plus its table identity.

    Records are fetched by a record provider and referenced by the walker and
    translator for the duration of a single export call.
    """

    entity_type: str
    table: str
    primary_key: str
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def pk(self) -> Any:
        return self.attributes.get(self.primary_key)

    @property
    def key(self) -> EntityKey:
        """Return the unique key for this record."""
        return EntityKey(self.entity_type, self.pk)

    def get(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def set(self, name: str, value: Any) -> None:
        if name not in self.attributes:
            raise KeyError(f"{self.entity_type} has no attribute {name!r}")
        self.attributes[name] = value

    def has(self, name: str) -> bool:
        return name in self.attributes

    def columns(self) -> tuple[str, ...]:
        return tuple(self.attributes)

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(self.attributes.items())

    def copy(self) -> Record:
        return Record(
            entity_type=self.entity_type,
            table=self.table,
            primary_key=self.primary_key,
            attributes=dict(self.attributes),
        )

    def __repr__(self) -> str:
        return f"Record({self.entity_type}#{self.pk!r})"


@dataclass(frozen=True)
class RawRow:
    """A row with no backing entity, e.g. a synthesized join-table row."""

    table: str
    values: Mapping[str, Any] = field(default_factory=dict)
    key_columns: tuple[str, ...] = ()

    def columns(self) -> tuple[str, ...]:
        return tuple(self.values)

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(self.values.items())


ChangeRecord = Record | RawRow
Batch = list[ChangeRecord]
