"""Literal rendering and INSERT statement assembly per SQL dialect."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from seedwalk.models.config import Dialect, OnDuplicate


class LiteralRenderer:
    """Renders identifiers and values as SQL literal text for one dialect.

    ``render`` receives the table and column alongside the value so a
    subclass can special-case individual columns.
    """

    def __init__(self, dialect: Dialect = Dialect.SQLITE) -> None:
        self.dialect = Dialect(dialect)

    def quote_identifier(self, name: str) -> str:
        if self.dialect is Dialect.MYSQL:
            return "`" + name.replace("`", "``") + "`"
        return '"' + name.replace('"', '""') + '"'

    def quote_string(self, text: str) -> str:
        escaped = text.replace("'", "''")
        if self.dialect is Dialect.MYSQL:
            escaped = escaped.replace("\\", "\\\\")
        return f"'{escaped}'"

    def render(self, table: str, column: str, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            if self.dialect is Dialect.SQLITE:
                return "1" if value else "0"
            return "TRUE" if value else "FALSE"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return repr(value) if math.isfinite(value) else self.quote_string(repr(value))
        if isinstance(value, Decimal):
            # Fixed-point text keeps every digit; no float round-trip.
            return format(value, "f") if value.is_finite() else self.quote_string(str(value))
        if isinstance(value, datetime):
            return self.quote_string(value.isoformat(sep=" "))
        if isinstance(value, (date, time)):
            return self.quote_string(value.isoformat())
        if isinstance(value, memoryview):
            value = value.tobytes()
        if isinstance(value, (bytes, bytearray)):
            if self.dialect is Dialect.POSTGRES:
                return f"'\\x{bytes(value).hex()}'::bytea"
            return f"X'{bytes(value).hex()}'"
        if isinstance(value, (dict, list, tuple)):
            return self.quote_string(json.dumps(value, sort_keys=True, default=str))
        return self.quote_string(str(value))


def on_duplicate_clause(
    renderer: LiteralRenderer,
    columns: Sequence[str],
    key_columns: Sequence[str],
    policy: OnDuplicate,
) -> str:
    """Clause appended after VALUES (...) for *policy*, or "" for FAIL."""
    policy = OnDuplicate(policy)
    if policy is OnDuplicate.FAIL:
        return ""

    quote = renderer.quote_identifier
    if renderer.dialect is Dialect.MYSQL:
        if policy is OnDuplicate.IGNORE:
            # A self-assignment turns the conflicting insert into a no-op.
            first = quote(key_columns[0] if key_columns else columns[0])
            return f"ON DUPLICATE KEY UPDATE {first} = {first}"
        updates = ", ".join(f"{quote(column)} = VALUES({quote(column)})" for column in columns)
        return f"ON DUPLICATE KEY UPDATE {updates}"

    if policy is OnDuplicate.IGNORE:
        return "ON CONFLICT DO NOTHING"
    if not key_columns:
        raise ValueError(f"override on {renderer.dialect} needs key columns for the conflict target")
    target = ", ".join(quote(column) for column in key_columns)
    updatable = [column for column in columns if column not in key_columns]
    if not updatable:
        return f"ON CONFLICT ({target}) DO NOTHING"
    updates = ", ".join(f"{quote(column)} = excluded.{quote(column)}" for column in updatable)
    return f"ON CONFLICT ({target}) DO UPDATE SET {updates}"


def insert_statement(
    renderer: LiteralRenderer,
    table: str,
    values: Mapping[str, Any],
    key_columns: Sequence[str] = (),
    on_duplicate: OnDuplicate = OnDuplicate.FAIL,
) -> str:
    """Render ``INSERT INTO t (cols) VALUES (literals)[ clause];``."""
    columns = list(values)
    if not columns:
        raise ValueError(f"cannot render an INSERT into {table!r} without columns")
    column_sql = ", ".join(renderer.quote_identifier(column) for column in columns)
    value_sql = ", ".join(renderer.render(table, column, values[column]) for column in columns)
    statement = f"INSERT INTO {renderer.quote_identifier(table)} ({column_sql}) VALUES ({value_sql})"
    clause = on_duplicate_clause(renderer, columns, key_columns, on_duplicate)
    if clause:
        statement = f"{statement} {clause}"
    return statement + ";"
