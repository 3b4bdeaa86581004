"""Tests for the MiniDB handle and connect()."""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from minidb import MiniDB, connect, init_project
from minidb.core.storage import FileBlobStore, MemoryBlobStore
from minidb.errors import SnapshotFormatError


class TestMiniDB:
    """Test the MiniDB facade."""

    def test_in_memory_handles_are_independent(self):
        first = MiniDB()
        second = MiniDB()
        first.create_table("users")
        assert second.list_tables() == []

    def test_shared_blob_store(self):
        blobs = MemoryBlobStore()
        first = MiniDB(blob_store=blobs)
        first.create_table("users", {"name": "string"})
        first.insert("users", {"name": "Ada"})

        second = MiniDB(blob_store=blobs)
        assert [row["name"] for row in second.list_rows("users")] == ["Ada"]

    def test_reload_picks_up_external_changes(self):
        blobs = MemoryBlobStore()
        reader = MiniDB(blob_store=blobs)
        writer = MiniDB(blob_store=blobs)
        writer.create_table("users")

        assert reader.list_tables() == []
        reader.reload()
        assert [t.name for t in reader.list_tables()] == ["users"]

    def test_snapshot_property_is_a_copy(self, db):
        db.create_table("users")
        snapshot = db.snapshot
        snapshot.remove_table("users")
        assert db.tables.table_exists("users")

    def test_corrupt_stored_snapshot(self):
        with pytest.raises(SnapshotFormatError):
            MiniDB(blob_store=MemoryBlobStore({"minidb": b'{"meta": {}}'}))

    def test_full_crud_through_facade(self, db):
        db.create_table("users", {"name": "string"})
        db.add_column("users", "age", "number")
        row = db.insert("users", {"name": "Ada", "age": 36})
        db.update("users", row["id"], {"age": 37})
        assert db.get_row("users", row["id"])["age"] == 37
        db.delete("users", row["id"])
        db.drop_column("users", "age")
        db.drop_table("users")
        assert db.list_tables() == []


class TestConnect:
    """Test connect()."""

    @pytest.fixture
    def temp_project(self):
        """Create a temporary project."""
        temp = tempfile.mkdtemp()
        project_dir = Path(temp).resolve()
        init_project(project_dir)
        yield project_dir
        shutil.rmtree(temp)

    def test_connect_to_project(self, temp_project):
        db = connect(temp_project)
        assert isinstance(db.store.blob_store, FileBlobStore)
        assert db.project_dir == temp_project

        db.create_table("users", {"name": "string"})
        db.insert("users", {"name": "Ada"})

        again = connect(temp_project)
        assert again.data.count("users") == 1

    def test_connect_from_cwd(self, temp_project, monkeypatch):
        nested = temp_project / "sub"
        nested.mkdir()
        monkeypatch.chdir(nested)
        db = connect()
        assert db.project_dir == temp_project

    def test_connect_without_project(self, monkeypatch):
        temp = tempfile.mkdtemp()
        try:
            monkeypatch.chdir(temp)
            with pytest.raises(ValueError, match="minidb init"):
                connect()
        finally:
            os.chdir(Path(temp).parent)
            shutil.rmtree(temp)

    def test_connect_in_memory(self):
        db = connect(in_memory=True)
        assert isinstance(db.store.blob_store, MemoryBlobStore)
        assert db.project_dir is None

    def test_connect_with_snapshot_key(self, temp_project):
        db = connect(temp_project, snapshot_key="scratch")
        db.create_table("notes")
        assert (temp_project / ".minidb" / "data" / "scratch.json").exists()
        assert connect(temp_project).list_tables() == []
