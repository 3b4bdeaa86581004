"""Core data models for MiniDB."""

from .base import MiniDBBaseModel
from .table import (
    Column,
    ColumnType,
    ForeignKeyRef,
    OnDeletePolicy,
    TableSchema,
    Table,
    Row,
    ID_COLUMN,
)
from .snapshot import Snapshot, SnapshotMeta, SNAPSHOT_VERSION
from .result import QueryResult, ResultKind

__all__ = [
    "MiniDBBaseModel",
    "Column",
    "ColumnType",
    "ForeignKeyRef",
    "OnDeletePolicy",
    "TableSchema",
    "Table",
    "Row",
    "ID_COLUMN",
    "Snapshot",
    "SnapshotMeta",
    "SNAPSHOT_VERSION",
    "QueryResult",
    "ResultKind",
]
