"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from seedwalk.models.config import (
    Dialect,
    ExportConfig,
    LogConfig,
    OnDuplicate,
    SeedwalkConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"SEEDWALK_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ValueError(f"SEEDWALK_{key} must be an integer, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_optional_int(key: str) -> int | None:
    raw = _env(key, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"SEEDWALK_{key} must be an integer, got {raw!r}") from exc


def _env_list(key: str) -> list[str]:
    return [item.strip() for item in _env(key, "").split(",") if item.strip()]


def _validate_choice(value: str, enum: type[Dialect] | type[OnDuplicate]) -> str:
    valid = {member.value for member in enum}
    if value.lower() not in valid:
        raise ValueError(f"Invalid {enum.__name__} value: {value}. Must be one of {sorted(valid)}")
    return value.lower()


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> SeedwalkConfig:
    """Load configuration from SEEDWALK_* environment variables.

    Obfuscation rules loaded this way always use the default shuffle
    strategy; custom callables can only be supplied programmatically.
    """
    return SeedwalkConfig(
        export=ExportConfig(
            obfuscate={key: None for key in _env_list("OBFUSCATE")},
            on_duplicate=OnDuplicate(_validate_choice(_env("ON_DUPLICATE", "fail"), OnDuplicate)),
            dialect=Dialect(_validate_choice(_env("DIALECT", "sqlite"), Dialect)),
            batch_size=_env_int("BATCH_SIZE", 1000, min_val=1, max_val=100_000),
            obfuscation_seed=_env_optional_int("OBFUSCATION_SEED"),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
