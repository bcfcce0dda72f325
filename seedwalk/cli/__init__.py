"""seedwalk command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``seedwalk`` script).
"""

from seedwalk.cli.main import cli

__all__ = ["cli"]
