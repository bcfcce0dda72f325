"""Entry point for `python -m seedwalk`.

Usage:
    python -m seedwalk export app.db --schema schema.json --root Chef --id 1
"""

from __future__ import annotations

from seedwalk.cli import cli

cli()
