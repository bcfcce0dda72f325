"""Turns batches of change records into INSERT statements."""

from __future__ import annotations

import random
from collections.abc import Iterable

import structlog

from seedwalk.graph.models import ChangeRecord, RawRow, Record
from seedwalk.models.config import ExportConfig
from seedwalk.observability.metrics import statements_total
from seedwalk.translate.obfuscator import obfuscate
from seedwalk.translate.sql import LiteralRenderer, insert_statement

_log = structlog.get_logger(component="translate.translator")


class Translator:
    """Renders change records for one export call.

    A single instance should serve a whole call so the obfuscation random
    source advances across batches instead of restarting per batch.
    """

    def __init__(
        self,
        config: ExportConfig | None = None,
        renderer: LiteralRenderer | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or ExportConfig()
        self.renderer = renderer or LiteralRenderer(self.config.dialect)
        self._rng = rng or random.Random(self.config.obfuscation_seed)

    def translate(self, items: Iterable[ChangeRecord], *, in_place: bool = True) -> list[str]:
        """Render *items* in order, then drop textually repeated statements.

        Entity records are obfuscated first; raw rows never are.  With
        ``in_place=False`` the records are copied before obfuscation, so
        callers still walking their relations keep the real key values.
        """
        items = list(items)
        if not items:
            return []
        if not in_place:
            items = [item.copy() if isinstance(item, Record) else item for item in items]

        records = [item for item in items if isinstance(item, Record)]
        if records and self.config.obfuscate:
            obfuscate(records, self.config.obfuscate, self._rng)

        statements = [self._render(item) for item in items]
        unique = list(dict.fromkeys(statements))
        if len(unique) != len(statements):
            _log.debug("duplicate_statements_dropped", dropped=len(statements) - len(unique))
        return unique

    def _render(self, item: ChangeRecord) -> str:
        if isinstance(item, RawRow):
            table, values, keys = item.table, item.values, item.key_columns
        else:
            table, values, keys = item.table, item.attributes, (item.primary_key,)
        statements_total.labels(table=table).inc()
        return insert_statement(self.renderer, table, values, keys, self.config.on_duplicate)


def translate(items: Iterable[ChangeRecord], config: ExportConfig | None = None) -> list[str]:
    """One-shot translation with a fresh Translator."""
    return Translator(config).translate(items)
