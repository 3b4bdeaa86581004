"""Snapshot persistence for MiniDB.

The store only needs a byte-oriented blob store keyed by a fixed identifier.
Snapshots are serialized as JSON.
"""

import errno
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from minidb.errors import SnapshotFormatError, StorageError
from minidb.models import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_KEY = "minidb"


class BlobStore:
    """Key-value store of opaque byte blobs."""

    def get(self, key: str) -> Optional[bytes]:
        """Return the blob stored under ``key``, or None if absent."""
        raise NotImplementedError

    def put(self, key: str, data: bytes) -> None:
        """Replace the blob stored under ``key``.

        Raises:
            StorageError: If the blob cannot be written
        """
        raise NotImplementedError


class MemoryBlobStore(BlobStore):
    """Blob store held in process memory."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._blobs: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._blobs.get(key)

    def put(self, key: str, data: bytes) -> None:
        self._blobs[key] = bytes(data)


class FileBlobStore(BlobStore):
    """Blob store backed by one ``<key>.json`` file per key in a directory.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a failed write never leaves a truncated blob behind.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read snapshot '{path}': {e}") from e

    def put(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=".tmp", dir=str(self.directory)
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            if e.errno == errno.ENOSPC:
                raise StorageError("Failed to save database. Storage may be full.") from e
            raise StorageError(f"Failed to save database to '{path}': {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)


def read_document(document: Union[str, bytes, Dict[str, Any]]) -> Dict[str, Any]:
    """Decode JSON text into a snapshot-shaped mapping.

    Raises:
        SnapshotFormatError: If the text is not valid JSON or the document
            is missing ``meta`` or ``tables``
    """
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SnapshotFormatError(f"Invalid snapshot JSON: {e}") from e

    if (
        not isinstance(document, dict)
        or not isinstance(document.get("meta"), dict)
        or not isinstance(document.get("tables"), dict)
    ):
        raise SnapshotFormatError(
            "Invalid database format. Expected { meta: {}, tables: {} }"
        )
    return document


def decode_snapshot(document: Union[str, bytes, Dict[str, Any]]) -> Snapshot:
    """Build a Snapshot from JSON text or an already-decoded mapping.

    Raises:
        SnapshotFormatError: If the document is not valid JSON, is missing
            ``meta`` or ``tables``, or describes an invalid table
    """
    document = read_document(document)
    try:
        return Snapshot.model_validate(document)
    except ValidationError as e:
        raise SnapshotFormatError(f"Invalid database format: {e}") from e


def encode_snapshot(snapshot: Snapshot, indent: Optional[int] = None) -> str:
    """Serialize a snapshot to JSON text."""
    return json.dumps(snapshot.to_dict(), indent=indent)


def load_snapshot(blob_store: BlobStore, key: str = DEFAULT_SNAPSHOT_KEY) -> Snapshot:
    """Load the current snapshot, or a fresh empty one if none is stored."""
    raw = blob_store.get(key)
    if raw is None:
        logger.debug(f"No snapshot stored under '{key}', starting empty")
        return Snapshot()
    return decode_snapshot(raw)


def save_snapshot(
    blob_store: BlobStore, snapshot: Snapshot, key: str = DEFAULT_SNAPSHOT_KEY
) -> None:
    """Replace the stored snapshot.

    Raises:
        StorageError: If the blob store rejects the write
    """
    blob_store.put(key, encode_snapshot(snapshot).encode("utf-8"))
