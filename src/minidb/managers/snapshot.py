"""Snapshot import and export for MiniDB."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from minidb.core.storage import decode_snapshot, encode_snapshot, read_document
from minidb.errors import SnapshotFormatError, StorageError
from minidb.managers.base import BaseManager
from minidb.models import Snapshot, SnapshotMeta

logger = logging.getLogger(__name__)

Document = Union[str, bytes, Dict[str, Any]]


class SnapshotManager(BaseManager):
    """Imports and exports whole-database snapshots."""

    def export_snapshot(self, indent: Optional[int] = 2) -> str:
        """Serialize the current database to JSON text."""
        return encode_snapshot(self.snapshot, indent=indent)

    def import_snapshot(self, document: Document, overwrite: bool = False) -> Snapshot:
        """Import a snapshot document.

        Args:
            document: JSON text or mapping with ``meta`` and ``tables``
            overwrite: Replace the whole database; otherwise imported tables
                replace same-named tables, other tables are kept, and ``meta``
                is shallow-merged

        Returns:
            Copy of the resulting snapshot

        Raises:
            SnapshotFormatError: If the document is malformed
            StorageError: If the result cannot be saved
        """
        raw = read_document(document)
        imported = decode_snapshot(raw)

        if overwrite:
            self.store.replace(imported)
            logger.info(f"Imported snapshot with {len(imported.tables)} table(s), replacing all data")
            return self.snapshot.deep_copy()

        with self.store.transaction() as snapshot:
            for table in imported.tables.values():
                snapshot.add_table(table)
            try:
                snapshot.meta = SnapshotMeta.model_validate(
                    {**snapshot.meta.to_dict(), **raw["meta"]}
                )
            except ValidationError as e:
                raise SnapshotFormatError(f"Invalid snapshot meta: {e}") from e

        logger.info(
            f"Merged snapshot: {len(imported.tables)} table(s) imported "
            f"({', '.join(imported.list_tables()) or 'none'})"
        )
        return self.snapshot.deep_copy()

    def export_to_file(self, path: Path, indent: Optional[int] = 2) -> Path:
        """Write the exported snapshot to a file.

        Raises:
            StorageError: If the file cannot be written
        """
        path = Path(path)
        try:
            path.write_text(self.export_snapshot(indent=indent), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write export file '{path}': {e}") from e
        return path

    def import_file(self, path: Path, overwrite: bool = False) -> Snapshot:
        """Import a snapshot from a JSON file.

        Raises:
            StorageError: If the file cannot be read
            SnapshotFormatError: If the file is not a valid snapshot
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read import file '{path}': {e}") from e
        return self.import_snapshot(text, overwrite=overwrite)
