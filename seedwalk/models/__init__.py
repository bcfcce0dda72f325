"""Core data structures for seedwalk."""

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
from seedwalk.models.config import (
    Dialect,
    ExportConfig,
    LogConfig,
    OnDuplicate,
    SeedwalkConfig,
    Strategy,
)

__all__ = [
    "Batch",
    "ChangeRecord",
    "Dialect",
    "EntityKey",
    "ExportConfig",
    "JoinKey",
    "LogConfig",
    "OnDuplicate",
    "RawRow",
    "Record",
    "RelationDescriptor",
    "RelationKind",
    "SeedwalkConfig",
    "Strategy",
]
