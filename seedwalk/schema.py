"""Declarative model schema; the bundled RelationResolver.

Models and their relations are declared once, then resolved into
RelationDescriptor values the walker consumes:

    schema = Schema()
    schema.define("Chef", "chefs").has_many("recipes", "Recipe")
    schema.define("Recipe", "recipes").belongs_to("chef", "Chef").has_and_belongs_to_many(
        "tags", "Tag"
    )
    schema.define("Tag", "tags")

Default key names follow the usual conventions: ``belongs_to("chef")`` reads
``chef_id``; ``has_many`` / ``has_one`` on ``Chef`` look for ``chef_id`` on the
target; a join table defaults to the two table names sorted and joined by
``_``.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from seedwalk.graph.models import RelationDescriptor, RelationKind

_RE_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

_DECLARATION_KINDS: dict[str, RelationKind] = {
    "belongs_to": RelationKind.TO_ONE_DIRECT,
    "has_one": RelationKind.TO_ONE_REVERSE,
    "has_one_through": RelationKind.TO_ONE_THROUGH,
    "has_many": RelationKind.TO_MANY_DIRECT,
    "has_many_through": RelationKind.TO_MANY_THROUGH,
    "has_and_belongs_to_many": RelationKind.TO_MANY_JOIN,
}


class UnknownEntityError(KeyError):
    """Raised when an entity type was never declared in the schema."""


def _underscore(name: str) -> str:
    return _RE_CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()


@dataclass
class ModelSpec:
    """One declared entity type and its (unresolved) relations."""

    name: str
    table: str
    primary_key: str = "id"
    relations: dict[str, RelationDescriptor] = field(default_factory=dict)

    def _declare(self, name: str, kind: RelationKind, **fields: Any) -> ModelSpec:
        self.relations[name] = RelationDescriptor(name=name, kind=kind, owner=self.name, **fields)
        return self

    def belongs_to(self, name: str, target: str, foreign_key: str | None = None) -> ModelSpec:
        return self._declare(
            name,
            RelationKind.TO_ONE_DIRECT,
            target=target,
            foreign_key=foreign_key or f"{name}_id",
        )

    def has_one(self, name: str, target: str, foreign_key: str | None = None) -> ModelSpec:
        return self._declare(
            name,
            RelationKind.TO_ONE_REVERSE,
            target=target,
            foreign_key=foreign_key or f"{_underscore(self.name)}_id",
        )

    def has_many(self, name: str, target: str, foreign_key: str | None = None) -> ModelSpec:
        return self._declare(
            name,
            RelationKind.TO_MANY_DIRECT,
            target=target,
            foreign_key=foreign_key or f"{_underscore(self.name)}_id",
        )

    def has_one_through(self, name: str, through: str, source: str | None = None) -> ModelSpec:
        return self._declare(name, RelationKind.TO_ONE_THROUGH, through=through, source=source or name)

    def has_many_through(self, name: str, through: str, source: str | None = None) -> ModelSpec:
        return self._declare(name, RelationKind.TO_MANY_THROUGH, through=through, source=source or name)

    def has_and_belongs_to_many(
        self,
        name: str,
        target: str,
        join_table: str | None = None,
        foreign_key: str | None = None,
        association_foreign_key: str | None = None,
    ) -> ModelSpec:
        return self._declare(
            name,
            RelationKind.TO_MANY_JOIN,
            target=target,
            join_table=join_table,
            join_foreign_key=foreign_key or f"{_underscore(self.name)}_id",
            join_association_key=association_foreign_key or f"{_underscore(target)}_id",
        )


class Schema:
    """Registry of declared models; resolves relation names to descriptors."""

    def __init__(self) -> None:
        self._models: dict[str, ModelSpec] = {}

    def define(self, name: str, table: str, primary_key: str = "id") -> ModelSpec:
        """Declare (or redeclare) an entity type and return it for chaining."""
        spec = ModelSpec(name=name, table=table, primary_key=primary_key)
        self._models[name] = spec
        return spec

    def model(self, name: str) -> ModelSpec:
        try:
            return self._models[name]
        except KeyError:
            raise UnknownEntityError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._models

    @property
    def models(self) -> tuple[ModelSpec, ...]:
        return tuple(self._models.values())

    def resolve(self, entity_type: str, name: str) -> RelationDescriptor | None:
        """Return the resolved descriptor, or None for an unknown relation.

        Resolution fills in defaults that need other models: join table
        names and the final target of a through relation.
        """
        spec = self._models.get(entity_type)
        if spec is None:
            return None
        declared = spec.relations.get(name)
        if declared is None:
            return None

        if declared.kind is RelationKind.TO_MANY_JOIN and declared.join_table is None:
            target = self._models.get(declared.target or "")
            if target is None:
                return None
            join_table = "_".join(sorted((spec.table, target.table)))
            return dataclasses.replace(declared, join_table=join_table)

        if declared.kind.is_through and declared.through and declared.source:
            through = self.resolve(entity_type, declared.through)
            if through is not None and through.target is not None:
                source = self.resolve(through.target, declared.source)
                if source is not None and source.target is not None:
                    return dataclasses.replace(declared, target=source.target)

        return declared

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Schema:
        """Build a schema from a JSON-shaped mapping.

        Expected shape::

            {"models": {"Chef": {"table": "chefs", "primary_key": "id",
                                 "relations": {"recipes": {"kind": "has_many",
                                                           "target": "Recipe"}}}}}
        """
        schema = cls()
        models = data.get("models")
        if not isinstance(models, Mapping):
            raise ValueError("schema must contain a 'models' mapping")
        for model_name, model_data in models.items():
            if not isinstance(model_data, Mapping) or "table" not in model_data:
                raise ValueError(f"model {model_name!r} must declare a 'table'")
            spec = schema.define(
                model_name,
                model_data["table"],
                model_data.get("primary_key", "id"),
            )
            for relation_name, options in (model_data.get("relations") or {}).items():
                options = dict(options)
                kind = options.pop("kind", None)
                if kind not in _DECLARATION_KINDS:
                    raise ValueError(
                        f"relation {model_name}.{relation_name} has unknown kind {kind!r}; "
                        f"expected one of {sorted(_DECLARATION_KINDS)}"
                    )
                try:
                    getattr(spec, kind)(relation_name, **options)
                except TypeError as exc:
                    raise ValueError(f"relation {model_name}.{relation_name}: {exc}") from exc
        return schema
