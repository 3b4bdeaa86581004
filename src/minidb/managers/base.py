"""Base manager class and shared context for all MiniDB managers."""

from dataclasses import dataclass

from minidb.core.store import TableStore
from minidb.errors import TableNotFoundError
from minidb.models import Snapshot, Table
from minidb.utils.name_validator import normalize_table_name


@dataclass
class StoreContext:
    """Shared store context for all managers.

    Gives every manager the same ``TableStore`` and lets managers reach each
    other without passing the store around.

    Attributes:
        store: The table store all managers read and mutate
    """
    store: TableStore

    # Manager properties for convenient access
    # These use lazy imports to avoid circular dependencies

    @property
    def tables(self) -> "TableManager":
        """Access TableManager for this context."""
        from minidb.managers.table import TableManager
        return TableManager(self)

    @property
    def columns(self) -> "ColumnManager":
        """Access ColumnManager for this context."""
        from minidb.managers.column import ColumnManager
        return ColumnManager(self)

    @property
    def data(self) -> "DataManager":
        """Access DataManager for this context."""
        from minidb.managers.data import DataManager
        return DataManager(self)

    @property
    def constraints(self) -> "ConstraintEngine":
        """Access ConstraintEngine for this context."""
        from minidb.managers.constraints import ConstraintEngine
        return ConstraintEngine(self)

    @property
    def query(self) -> "QueryManager":
        """Access QueryManager for this context."""
        from minidb.managers.query import QueryManager
        return QueryManager(self)

    @property
    def snapshots(self) -> "SnapshotManager":
        """Access SnapshotManager for this context."""
        from minidb.managers.snapshot import SnapshotManager
        return SnapshotManager(self)


class BaseManager:
    """Base class for all MiniDB managers.

    Provides shared initialization and table lookup against the current
    snapshot (the working copy while a transaction is open).
    """

    def __init__(self, context: StoreContext):
        """Initialize base manager with store context.

        Args:
            context: StoreContext holding the table store
        """
        self.context = context
        self.store = context.store

    @property
    def snapshot(self) -> Snapshot:
        return self.store.snapshot

    def _require_table(self, table_name: str, snapshot: Snapshot = None) -> Table:
        """Return a table or raise TableNotFoundError.

        Args:
            table_name: Table name (case-insensitive)
            snapshot: Snapshot to look in (default: the current one)
        """
        snapshot = snapshot if snapshot is not None else self.snapshot
        name = normalize_table_name(table_name)
        table = snapshot.get_table(name)
        if table is None:
            raise TableNotFoundError(name)
        return table
