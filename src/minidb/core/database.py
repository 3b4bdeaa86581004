"""Unified database interface for MiniDB."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from minidb.config import Config
from minidb.core.path_utils import get_project_root
from minidb.core.storage import BlobStore, DEFAULT_SNAPSHOT_KEY, FileBlobStore
from minidb.core.store import TableStore
from minidb.managers.base import StoreContext
from minidb.models import Column, QueryResult, Row, Snapshot, Table

if TYPE_CHECKING:
    from minidb.managers.column import ColumnManager
    from minidb.managers.constraints import DeletePlan
    from minidb.managers.data import DataManager
    from minidb.managers.query import QueryManager
    from minidb.managers.snapshot import SnapshotManager
    from minidb.managers.table import TableManager

logger = logging.getLogger(__name__)


class MiniDB:
    """Handle to one MiniDB database.

    Owns a ``TableStore`` and exposes the table, column, row, query and
    snapshot operations. All state lives in the handle; there is no global
    "current database".

    The handle is not thread-safe. Callers sharing it between threads must
    hold their own lock around every call.

    Examples:
        db = MiniDB()  # in memory

        db.create_table("users", {"name": "string", "age": "number"})
        user = db.insert("users", {"name": "Ada", "age": 36})

        result = db.query("SELECT name FROM users WHERE age > 30")
        if result.ok:
            print(result.data)
    """

    def __init__(
        self,
        blob_store: Optional[BlobStore] = None,
        snapshot_key: str = DEFAULT_SNAPSHOT_KEY,
        project_dir: Optional[Path] = None,
    ):
        """Open a database.

        Args:
            blob_store: Where the snapshot is persisted (default: in memory)
            snapshot_key: Key the snapshot is stored under
            project_dir: Project directory this handle was opened from, if any

        Raises:
            SnapshotFormatError: If the stored snapshot cannot be decoded
            StorageError: If the stored snapshot cannot be read
        """
        self.project_dir = Path(project_dir) if project_dir is not None else None
        self.store = TableStore(blob_store, snapshot_key)
        self.context = StoreContext(self.store)

    # Manager access

    @property
    def tables(self) -> "TableManager":
        return self.context.tables

    @property
    def columns(self) -> "ColumnManager":
        return self.context.columns

    @property
    def data(self) -> "DataManager":
        return self.context.data

    @property
    def queries(self) -> "QueryManager":
        return self.context.query

    @property
    def snapshots(self) -> "SnapshotManager":
        return self.context.snapshots

    @property
    def snapshot(self) -> Snapshot:
        """Copy of the current snapshot."""
        return self.store.snapshot.deep_copy()

    # Tables and columns

    def create_table(
        self,
        name: str,
        columns: Optional[Any] = None,
        foreign_keys: Optional[Any] = None,
    ) -> Table:
        """Create a table. See ``TableManager.create_table``."""
        return self.tables.create_table(name, columns, foreign_keys)

    def drop_table(self, name: str) -> None:
        self.tables.drop_table(name)

    def get_table(self, name: str) -> Table:
        return self.tables.get_table(name)

    def list_tables(self) -> List[Table]:
        return self.tables.list_tables()

    def add_column(
        self,
        table: str,
        name: str,
        type: str,
        default: Any = None,
        foreign_key: Optional[Any] = None,
    ) -> Column:
        """Add a column. See ``ColumnManager.add_column``."""
        return self.columns.add_column(table, name, type, default, foreign_key)

    def drop_column(self, table: str, name: str) -> None:
        self.columns.drop_column(table, name)

    # Rows

    def insert(self, table: str, data: Dict[str, Any]) -> Row:
        """Insert a row. See ``DataManager.insert``."""
        return self.data.insert(table, data)

    def update(self, table: str, row_id: str, changes: Dict[str, Any]) -> Row:
        """Update a row. See ``DataManager.update``."""
        return self.data.update(table, row_id, changes)

    def delete(self, table: str, row_id: str) -> "DeletePlan":
        """Delete a row. See ``DataManager.delete``."""
        return self.data.delete(table, row_id)

    def get_row(self, table: str, row_id: str) -> Row:
        return self.data.get_row(table, row_id)

    def list_rows(self, table: str) -> List[Row]:
        return self.data.list_rows(table)

    # Query language

    def query(self, text: str, include_snapshot: bool = False) -> QueryResult:
        """Run one query. Never raises; errors come back in the result."""
        return self.queries.execute(text, include_snapshot=include_snapshot)

    # Snapshots

    def export_snapshot(self, indent: Optional[int] = 2) -> str:
        return self.snapshots.export_snapshot(indent=indent)

    def import_snapshot(self, document: Any, overwrite: bool = False) -> Snapshot:
        """Import a snapshot. See ``SnapshotManager.import_snapshot``."""
        return self.snapshots.import_snapshot(document, overwrite=overwrite)

    def reload(self) -> None:
        """Re-read the stored snapshot, dropping in-memory state."""
        self.store.reload()


def connect(
    project_dir: Optional[Path] = None,
    in_memory: bool = False,
    snapshot_key: Optional[str] = None,
) -> MiniDB:
    """Open a MiniDB database.

    Args:
        project_dir: Path to project directory (optional, will search for .minidb)
        in_memory: Open an empty database held only in memory
        snapshot_key: Override the configured snapshot key

    Returns:
        MiniDB handle

    Raises:
        ValueError: If no project is found

    Examples:
        # Project found from the current directory
        db = connect()

        # Explicit project directory
        db = connect(Path("/path/to/project"))

        # Throwaway in-memory database
        db = connect(in_memory=True)
    """
    if in_memory:
        return MiniDB(snapshot_key=snapshot_key or DEFAULT_SNAPSHOT_KEY)

    if project_dir is None:
        try:
            project_dir = get_project_root(Path.cwd())
        except FileNotFoundError:
            raise ValueError("No .minidb directory found. Run 'minidb init' first.")

    config = Config(project_dir)
    project_config = config.load()
    key = snapshot_key or project_config.snapshot_key
    logger.debug(f"Opening MiniDB project at {project_dir} (snapshot '{key}')")
    return MiniDB(
        blob_store=FileBlobStore(config.data_path),
        snapshot_key=key,
        project_dir=project_dir,
    )
