"""Prometheus counters for export activity."""

from __future__ import annotations

from prometheus_client import Counter

records_discovered_total = Counter(
    "seedwalk_records_discovered_total",
    "Entity records newly discovered by the graph walker",
    ["entity_type"],
)

join_rows_total = Counter(
    "seedwalk_join_rows_total",
    "Join-table rows synthesized by the graph walker",
    ["join_table"],
)

statements_total = Counter(
    "seedwalk_statements_total",
    "INSERT statements rendered by the translator",
    ["table"],
)

batches_delivered_total = Counter(
    "seedwalk_batches_delivered_total",
    "Non-empty statement batches handed to a streaming caller",
)
