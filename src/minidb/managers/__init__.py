"""MiniDB managers."""

from minidb.managers.base import BaseManager, StoreContext
from minidb.managers.table import TableManager
from minidb.managers.column import ColumnManager
from minidb.managers.data import DataManager
from minidb.managers.constraints import ConstraintEngine, DeletePlan
from minidb.managers.query import QueryManager
from minidb.managers.snapshot import SnapshotManager

__all__ = [
    "BaseManager",
    "StoreContext",
    "TableManager",
    "ColumnManager",
    "DataManager",
    "ConstraintEngine",
    "DeletePlan",
    "QueryManager",
    "SnapshotManager",
]
