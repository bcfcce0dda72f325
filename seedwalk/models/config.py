"""Configuration data structures."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

# An obfuscation strategy takes the old value (and optionally the record)
# and returns the replacement.  ``None`` means "shuffle the characters".
Strategy = Callable[..., Any]


class Dialect(StrEnum):
    """Target SQL dialect for rendered statements."""

    SQLITE = "sqlite"
    POSTGRES = "postgres"
    MYSQL = "mysql"


class OnDuplicate(StrEnum):
    """What a replayed INSERT does when the row already exists."""

    FAIL = "fail"
    IGNORE = "ignore"
    OVERRIDE = "override"


@dataclass
class ExportConfig:
    """Settings threaded through a single export call."""

    obfuscate: dict[str, Strategy | None] = field(default_factory=dict)
    on_duplicate: OnDuplicate = OnDuplicate.FAIL
    dialect: Dialect = Dialect.SQLITE
    batch_size: int = 1000
    obfuscation_seed: int | None = None

    def __post_init__(self) -> None:
        self.on_duplicate = OnDuplicate(self.on_duplicate)
        self.dialect = Dialect(self.dialect)
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if not isinstance(self.obfuscate, dict):
            # Allow a bare list of field keys.
            self.obfuscate = {str(key): None for key in self.obfuscate}


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class SeedwalkConfig:
    """Top-level seedwalk configuration."""

    export: ExportConfig = field(default_factory=ExportConfig)
    log: LogConfig = field(default_factory=LogConfig)
