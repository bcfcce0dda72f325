"""Export orchestration: bulk and streaming modes.

Bulk mode walks the whole reachable subgraph with unbounded pages, then
translates everything in one pass.  Streaming mode translates and hands
over each walker batch as soon as it is discovered, sharing one seen set
across every root of the call.

Each call gets its own seen set; nothing is remembered between calls.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import closing
from typing import Any

from seedwalk.graph import GraphWalker, SeenSet, normalize_relation_tree
from seedwalk.graph.models import ChangeRecord
from seedwalk.models.config import ExportConfig
from seedwalk.observability.logging import get_logger
from seedwalk.observability.metrics import batches_delivered_total
from seedwalk.provider.base import RecordProvider, RelationResolver
from seedwalk.translate.translator import Translator

_logger = get_logger("explore")

OnBatch = Callable[[list[str]], Any]


def collect(
    provider: RecordProvider,
    resolver: RelationResolver,
    root_type: str,
    ids: Any,
    relations: Any = None,
) -> list[ChangeRecord]:
    """Every change record reachable from the roots, in discovery order."""
    walker = GraphWalker(provider, resolver, SeenSet(), batch_size=None)
    tree = normalize_relation_tree(relations)
    return [item for batch in walker.walk_roots(root_type, ids, tree) for item in batch]


def explore(
    provider: RecordProvider,
    resolver: RelationResolver,
    root_type: str,
    ids: Any,
    relations: Any = None,
    config: ExportConfig | None = None,
) -> list[str]:
    """Bulk export: the complete, ordered, de-duplicated statement list."""
    config = config or ExportConfig()
    t_start = time.monotonic()
    _logger.debug("export_started", mode="bulk", root_type=root_type)
    items = collect(provider, resolver, root_type, ids, relations)
    statements = Translator(config).translate(items)
    _logger.info(
        "export_finished",
        mode="bulk",
        root_type=root_type,
        records=len(items),
        statements=len(statements),
        duration_ms=round((time.monotonic() - t_start) * 1000.0, 2),
    )
    return statements


def iter_stream(
    provider: RecordProvider,
    resolver: RelationResolver,
    root_type: str,
    ids: Any,
    relations: Any = None,
    config: ExportConfig | None = None,
    batch_size: int | None = None,
) -> Iterator[list[str]]:
    """Streaming export as a generator of non-empty statement batches.

    Stop consuming to abandon the export; open provider pages are closed
    when the generator is.
    """
    config = config or ExportConfig()
    size = config.batch_size if batch_size is None else batch_size
    seen = SeenSet()
    walker = GraphWalker(provider, resolver, seen, batch_size=size)
    translator = Translator(config)
    tree = normalize_relation_tree(relations)

    delivered = 0
    _logger.debug("export_started", mode="stream", root_type=root_type, batch_size=size)
    with closing(walker.walk_roots(root_type, ids, tree)) as batches:
        for batch in batches:
            # The walker follows these records after this batch is delivered.
            statements = translator.translate(batch, in_place=False)
            if not statements:
                continue
            delivered += 1
            batches_delivered_total.inc()
            yield statements

    _logger.info(
        "export_finished",
        mode="stream",
        root_type=root_type,
        batches=delivered,
        entities=seen.entity_count,
        join_rows=seen.join_count,
    )


def explore_stream(
    provider: RecordProvider,
    resolver: RelationResolver,
    root_type: str,
    ids: Any,
    relations: Any,
    on_batch: OnBatch,
    config: ExportConfig | None = None,
    batch_size: int | None = None,
) -> int:
    """Streaming export: call *on_batch* once per non-empty statement batch.

    Returns the number of batches delivered.  If the provider or an
    obfuscation strategy raises, batches already delivered stay delivered
    and the exception propagates.
    """
    delivered = 0
    for statements in iter_stream(provider, resolver, root_type, ids, relations, config, batch_size):
        on_batch(statements)
        delivered += 1
    return delivered


class Exporter:
    """A provider, a resolver and a config bundled for repeated exports."""

    def __init__(
        self,
        provider: RecordProvider,
        resolver: RelationResolver,
        config: ExportConfig | None = None,
    ) -> None:
        self.provider = provider
        self.resolver = resolver
        self.config = config or ExportConfig()

    def explore(self, root_type: str, ids: Any, relations: Any = None) -> list[str]:
        return explore(self.provider, self.resolver, root_type, ids, relations, self.config)

    def iter_stream(
        self, root_type: str, ids: Any, relations: Any = None, batch_size: int | None = None
    ) -> Iterator[list[str]]:
        return iter_stream(self.provider, self.resolver, root_type, ids, relations, self.config, batch_size)

    def explore_stream(
        self,
        root_type: str,
        ids: Any,
        relations: Any,
        on_batch: OnBatch,
        batch_size: int | None = None,
    ) -> int:
        return explore_stream(
            self.provider, self.resolver, root_type, ids, relations, on_batch, self.config, batch_size
        )
