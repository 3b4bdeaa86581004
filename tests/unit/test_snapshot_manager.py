"""Tests for snapshot import and export."""

import json
import shutil
import tempfile
from pathlib import Path

import pytest

from minidb.core.database import MiniDB
from minidb.errors import SnapshotFormatError, StorageError


class TestSnapshotManager:
    """Test SnapshotManager through the MiniDB facade."""

    @pytest.fixture
    def source(self, db):
        db.create_table("users", {"name": "string"})
        db.insert("users", {"name": "Ada"})
        return db

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for testing."""
        temp = tempfile.mkdtemp()
        yield Path(temp)
        shutil.rmtree(temp)

    def test_export_shape(self, source):
        document = json.loads(source.export_snapshot())
        assert set(document) == {"meta", "tables"}
        users = document["tables"]["users"]
        assert set(users) == {"name", "schema", "rows"}
        assert users["schema"]["columns"]["id"]["primary"] is True
        assert users["schema"]["foreignKeys"] == {}
        assert "createdAt" in document["meta"]

    def test_export_import_roundtrip(self, source):
        target = MiniDB()
        target.import_snapshot(source.export_snapshot(), overwrite=True)
        assert target.list_rows("users") == source.list_rows("users")
        assert target.get_table("users") == source.get_table("users")

    def test_overwrite_replaces_everything(self, source):
        other = MiniDB()
        other.create_table("orders", {"total": "number"})

        result = other.import_snapshot(source.export_snapshot(), overwrite=True)
        assert result.list_tables() == ["users"]
        assert other.tables.table_exists("orders") is False

    def test_merge_keeps_untouched_tables(self, source):
        other = MiniDB()
        other.create_table("orders", {"total": "number"})
        other.create_table("users", {"email": "string"})

        other.import_snapshot(source.export_snapshot())
        assert other.tables.table_exists("orders")
        assert list(other.get_table("users").columns) == ["id", "name"]
        assert [row["name"] for row in other.list_rows("users")] == ["Ada"]

    def test_merge_shallow_merges_meta(self, source):
        document = json.loads(source.export_snapshot())
        document["meta"] = {"owner": "ops"}
        created_at = source.snapshot.meta.created_at

        source.import_snapshot(document)
        meta = source.snapshot.meta.to_dict()
        assert meta["owner"] == "ops"
        assert meta["createdAt"] == created_at

    def test_import_accepts_mapping(self, db):
        db.import_snapshot({"meta": {}, "tables": {"tags": {"schema": {"columns": {"label": {"type": "string"}}}}}})
        assert db.get_table("tags").columns["label"].type == "string"

    def test_import_invalid_documents(self, source):
        before = source.export_snapshot()
        for document in ('{"tables": {}}', "not json", '{"meta": {}, "tables": {"t": {"rows": 5}}}'):
            with pytest.raises(SnapshotFormatError):
                source.import_snapshot(document)
        assert source.export_snapshot() == before

    def test_export_and_import_file(self, source, temp_dir):
        path = source.snapshots.export_to_file(temp_dir / "backup.json")
        assert path.exists()

        target = MiniDB()
        target.snapshots.import_file(path)
        assert [row["name"] for row in target.list_rows("users")] == ["Ada"]

    def test_import_missing_file(self, db, temp_dir):
        with pytest.raises(StorageError, match="Failed to read import file"):
            db.snapshots.import_file(temp_dir / "missing.json")
