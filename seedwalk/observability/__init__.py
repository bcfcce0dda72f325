"""Observability for seedwalk.

Submodules:
    logging -- structlog setup and component-bound loggers.
    metrics -- Prometheus counters for discovered records and emitted statements.
"""
