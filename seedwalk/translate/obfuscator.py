"""Field-level obfuscation of records before they are rendered.

Rules map a field key to a strategy:

    {"email": None}                          # shuffle characters, any table
    {"chefs.email": lambda old: "hidden"}    # only the chefs table
    {"password": lambda old, record: ...}    # strategy also sees the record

``obfuscate`` rewrites records IN PLACE.  Anything else holding the same
Record object during the export call sees the obfuscated value too; use
``obfuscated`` for a transformed copy instead.  A strategy that raises
aborts the export.
"""

from __future__ import annotations

import inspect
import random
from collections.abc import Iterable, Mapping

from seedwalk.graph.models import Record
from seedwalk.models.config import Strategy

Rules = Mapping[str, Strategy | None]


def split_rule(key: str) -> tuple[str | None, str]:
    """``"chefs.email"`` -> ``("chefs", "email")``; ``"email"`` -> ``(None, "email")``."""
    if "." in key:
        table, field_name = key.rsplit(".", 1)
        return table, field_name
    return None, key


def _arity(strategy: Strategy) -> int:
    try:
        params = inspect.signature(strategy).parameters.values()
    except (TypeError, ValueError):
        return 1
    positional = 0
    for param in params:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return 2
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional


def _is_empty(value: object) -> bool:
    return value is None or value == ""


def shuffle_value(value: object, rng: random.Random) -> str:
    """Length-preserving random permutation of the value's characters."""
    chars = list(str(value))
    rng.shuffle(chars)
    return "".join(chars)


def _new_value(value: object, strategy: Strategy | None, record: Record, rng: random.Random) -> object:
    if strategy is None:
        return shuffle_value(value, rng)
    if _arity(strategy) >= 2:
        return strategy(value, record)
    return strategy(value)


def _apply(record: Record, rules: list[tuple[str | None, str, Strategy | None]], rng: random.Random) -> None:
    for table, field_name, strategy in rules:
        if table is not None and table != record.table:
            continue
        if not record.has(field_name):
            continue
        value = record.get(field_name)
        if _is_empty(value):
            continue
        record.set(field_name, _new_value(value, strategy, record, rng))


def _parsed(rules: Rules) -> list[tuple[str | None, str, Strategy | None]]:
    return [(*split_rule(key), strategy) for key, strategy in rules.items()]


def obfuscate(records: Iterable[Record], rules: Rules, rng: random.Random | None = None) -> None:
    """Replace every non-empty field matched by *rules*, mutating *records*."""
    if not rules:
        return
    parsed = _parsed(rules)
    field_names = {field_name for _, field_name, _ in parsed}
    rng = rng or random.Random()
    for record in records:
        if field_names.isdisjoint(record.columns()):
            continue
        _apply(record, parsed, rng)


def obfuscated(record: Record, rules: Rules, rng: random.Random | None = None) -> Record:
    """Return an obfuscated copy of *record*, leaving the original untouched."""
    copy = record.copy()
    obfuscate([copy], rules, rng)
    return copy
