"""In-memory table store with whole-snapshot transactions."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from minidb.core.storage import (
    BlobStore,
    DEFAULT_SNAPSHOT_KEY,
    MemoryBlobStore,
    load_snapshot,
    save_snapshot,
)
from minidb.models import Snapshot
from minidb.utils.type_utils import now_iso

logger = logging.getLogger(__name__)


class TableStore:
    """Holds the current snapshot and commits changes back to a blob store.

    Every mutation runs inside ``transaction()``: it works on a deep copy of
    the snapshot, and the copy replaces the current state only after the blob
    store accepted it. Transactions nest; only the outermost one commits.

    The store does no locking. Callers sharing one store between threads must
    serialize access themselves.
    """

    def __init__(
        self,
        blob_store: Optional[BlobStore] = None,
        snapshot_key: str = DEFAULT_SNAPSHOT_KEY,
    ):
        """Initialize the store and load the current snapshot.

        Args:
            blob_store: Where snapshots are persisted (default: in memory)
            snapshot_key: Key the snapshot is stored under
        """
        self.blob_store = blob_store if blob_store is not None else MemoryBlobStore()
        self.snapshot_key = snapshot_key
        self._snapshot = load_snapshot(self.blob_store, self.snapshot_key)
        self._working: Optional[Snapshot] = None

    @property
    def snapshot(self) -> Snapshot:
        """Current state; the working copy while a transaction is open."""
        if self._working is not None:
            return self._working
        return self._snapshot

    @property
    def in_transaction(self) -> bool:
        return self._working is not None

    @contextmanager
    def transaction(self) -> Iterator[Snapshot]:
        """Open a transaction and yield the mutable working snapshot.

        Raises:
            StorageError: If the final write to the blob store fails; the
                in-memory state is left unchanged in that case
        """
        if self._working is not None:
            yield self._working
            return

        working = self._snapshot.deep_copy()
        self._working = working
        try:
            yield working
        except BaseException:
            self._working = None
            logger.debug("Transaction rolled back")
            raise
        self._working = None
        self._commit(working)

    def replace(self, snapshot: Snapshot) -> None:
        """Replace the whole snapshot."""
        if self._working is not None:
            raise RuntimeError("Cannot replace the snapshot inside a transaction")
        self._commit(snapshot.deep_copy())

    def reload(self) -> Snapshot:
        """Discard in-memory state and re-read the stored snapshot."""
        if self._working is not None:
            raise RuntimeError("Cannot reload inside a transaction")
        self._snapshot = load_snapshot(self.blob_store, self.snapshot_key)
        return self._snapshot

    def _commit(self, snapshot: Snapshot) -> None:
        snapshot.meta.updated_at = now_iso()
        save_snapshot(self.blob_store, snapshot, self.snapshot_key)
        self._snapshot = snapshot
        logger.debug("Transaction committed")
