"""Statement rendering for discovered records.

Submodules:
    obfuscator -- field-level value replacement applied before rendering.
    sql        -- literal rendering, on-duplicate clauses and INSERT assembly.
    translator -- batch translation with a per-call textual dedup pass.
"""

from seedwalk.translate.obfuscator import obfuscate, obfuscated
from seedwalk.translate.sql import LiteralRenderer, insert_statement, on_duplicate_clause
from seedwalk.translate.translator import Translator, translate

__all__ = [
    "LiteralRenderer",
    "Translator",
    "insert_statement",
    "obfuscate",
    "obfuscated",
    "on_duplicate_clause",
    "translate",
]
