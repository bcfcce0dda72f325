"""Relation tree normalization.

Callers declare which relations to follow in whichever shape is handy:

    "recipes"
    ["recipes", "profile"]
    {"recipes": "tags"}
    ["profile", {"recipes": ["tags", "ingredients"]}]

Every declaration is canonicalized into a read-only nested mapping of
relation name to nested tree, where an empty mapping marks a leaf.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

RelationTree = Mapping[str, "RelationTree"]

EMPTY_TREE: RelationTree = MappingProxyType({})


def normalize_relation_tree(declaration: Any) -> RelationTree:
    """Return the canonical, immutable form of a relation declaration.

    Duplicate names are merged by taking the union of their nested trees;
    the first occurrence of a name fixes its position.  Values that are not
    a name, a sequence or a mapping contribute no relations.
    """
    return _freeze(_normalize(declaration))


def _normalize(declaration: Any) -> dict[str, Any]:
    if isinstance(declaration, str):
        return {declaration: {}} if declaration else {}
    if isinstance(declaration, Mapping):
        merged: dict[str, Any] = {}
        for name, nested in declaration.items():
            _merge_into(merged, {str(name): _normalize(nested)})
        return merged
    if isinstance(declaration, Sequence) and not isinstance(declaration, (bytes, bytearray)):
        merged = {}
        for item in declaration:
            _merge_into(merged, _normalize(item))
        return merged
    return {}


def _merge_into(target: dict[str, Any], other: dict[str, Any]) -> None:
    for name, nested in other.items():
        if name in target:
            _merge_into(target[name], nested)
        else:
            target[name] = nested


def _freeze(tree: dict[str, Any]) -> RelationTree:
    if not tree:
        return EMPTY_TREE
    return MappingProxyType({name: _freeze(nested) for name, nested in tree.items()})


def tree_to_dict(tree: RelationTree) -> dict[str, Any]:
    """Plain-dict copy of a tree, for logging and JSON output."""
    return {name: tree_to_dict(nested) for name, nested in tree.items()}
