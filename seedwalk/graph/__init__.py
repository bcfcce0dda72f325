"""Record graph traversal.

Walks a caller-declared relation tree outward from seed records, yielding
batches of newly discovered rows with every entity and join row emitted
exactly once per export call.
"""

from seedwalk.graph.models import (
    Batch,
    ChangeRecord,
    EntityKey,
    JoinKey,
    RawRow,
    Record,
    RelationDescriptor,
    RelationKind,
)
from seedwalk.graph.seen import SeenSet
from seedwalk.graph.tree import EMPTY_TREE, RelationTree, normalize_relation_tree
from seedwalk.graph.walker import GraphWalker

__all__ = [
    "EMPTY_TREE",
    "Batch",
    "ChangeRecord",
    "EntityKey",
    "GraphWalker",
    "JoinKey",
    "RawRow",
    "Record",
    "RelationDescriptor",
    "RelationKind",
    "RelationTree",
    "SeenSet",
    "normalize_relation_tree",
]
