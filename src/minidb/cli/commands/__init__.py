"""CLI command modules."""

from . import table, column, data, query, snapshot

__all__ = [
    "table",
    "column",
    "data",
    "query",
    "snapshot",
]
