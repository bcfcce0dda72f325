"""Command-line entry point for exporting a SQLite slice."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any

import click

from seedwalk.config import load_config
from seedwalk.explore import explore, iter_stream
from seedwalk.models.config import Dialect, ExportConfig, OnDuplicate
from seedwalk.observability.logging import get_logger, setup_logging
from seedwalk.provider.base import ProviderError
from seedwalk.provider.sqlite import SqliteProvider
from seedwalk.schema import Schema, UnknownEntityError

_logger = get_logger("cli")


def _coerce_id(text: str) -> Any:
    stripped = text.strip()
    if stripped.lstrip("-").isdigit():
        return int(stripped)
    return stripped


def _parse_relations(text: str | None) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # Plain "recipes" or "recipes,profile" is accepted as a list of names.
        return [name.strip() for name in text.split(",") if name.strip()]


def _load_schema(path: Path) -> Schema:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"{path} is not valid JSON: {exc}", param_hint="--schema") from exc
    try:
        return Schema.from_dict(data)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--schema") from exc


@click.group()
@click.option("--log-level", type=click.Choice(["debug", "info", "warning", "error"]), default=None)
@click.option("--log-format", type=click.Choice(["json", "console"]), default="json", show_default=True)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_format: str) -> None:
    """Export seed-rooted relational subgraphs as INSERT statements."""
    try:
        config = load_config()
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc
    setup_logging(log_level or config.log.level, json=log_format == "json")
    ctx.obj = config


@cli.command("export")
@click.argument("database", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--schema",
    "schema_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file declaring models and relations.",
)
@click.option("--root", "root_type", required=True, help="Entity type of the seed records.")
@click.option("--id", "ids", multiple=True, help="Seed id; repeat for several. Omit to export every root.")
@click.option("--relations", default=None, help='Relation tree as JSON, e.g. \'{"recipes": "tags"}\'.')
@click.option("--batch-size", type=click.IntRange(min=1), default=None)
@click.option("--dialect", type=click.Choice([d.value for d in Dialect]), default=None)
@click.option("--on-duplicate", type=click.Choice([p.value for p in OnDuplicate]), default=None)
@click.option("--obfuscate", "obfuscate_fields", multiple=True, help="Field or table.field to shuffle.")
@click.option("--seed", type=int, default=None, help="Seed for reproducible obfuscation.")
@click.option("--output", type=click.File("w"), default="-", show_default=True)
@click.option("--bulk", is_flag=True, help="Collect the whole subgraph before writing.")
@click.pass_obj
def export(
    settings: Any,
    database: Path,
    schema_path: Path,
    root_type: str,
    ids: tuple[str, ...],
    relations: str | None,
    batch_size: int | None,
    dialect: str | None,
    on_duplicate: str | None,
    obfuscate_fields: tuple[str, ...],
    seed: int | None,
    output: IO[str],
    bulk: bool,
) -> None:
    """Write INSERT statements for ROOT records of DATABASE and their relations."""
    defaults: ExportConfig = settings.export
    obfuscate = dict(defaults.obfuscate)
    obfuscate.update({field_key: None for field_key in obfuscate_fields})
    config = ExportConfig(
        obfuscate=obfuscate,
        on_duplicate=OnDuplicate(on_duplicate or defaults.on_duplicate),
        dialect=Dialect(dialect or defaults.dialect),
        batch_size=batch_size or defaults.batch_size,
        obfuscation_seed=seed if seed is not None else defaults.obfuscation_seed,
    )

    schema = _load_schema(schema_path)
    if root_type not in schema:
        raise click.BadParameter(f"unknown entity type {root_type!r}", param_hint="--root")
    seed_ids = [_coerce_id(value) for value in ids] if ids else None
    tree = _parse_relations(relations)

    written = 0
    try:
        with SqliteProvider.open(database, schema) as provider:
            if bulk:
                batches = iter([explore(provider, schema, root_type, seed_ids, tree, config)])
            else:
                batches = iter_stream(provider, schema, root_type, seed_ids, tree, config)
            for statements in batches:
                for statement in statements:
                    output.write(statement + "\n")
                written += len(statements)
                output.flush()
    except (ProviderError, UnknownEntityError) as exc:
        _logger.error("export_failed", error=str(exc))
        raise click.ClickException(str(exc)) from exc

    _logger.info("export_written", statements=written, database=str(database))
