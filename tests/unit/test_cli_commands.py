"""Tests for CLI table, column, data and snapshot commands."""

import json
import shutil
import tempfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from minidb.cli.main import app
from minidb.core.database import connect
from minidb.core.initializer import init_project


def row_id_from_output(output: str) -> str:
    for line in output.splitlines():
        if "ID:" in line:
            return line.split("ID:", 1)[1].strip()
    raise AssertionError(f"No ID in output: {output}")


class TestCLICommands:
    """Test suite for CLI command groups."""

    @pytest.fixture
    def runner(self):
        """Create a CLI runner."""
        return CliRunner()

    @pytest.fixture
    def temp_project(self, monkeypatch):
        """Create a temporary project and point the CLI at it."""
        temp = tempfile.mkdtemp()
        project_dir = Path(temp)
        init_project(project_dir)
        monkeypatch.setenv("MINIDB_PROJECT_DIR", str(project_dir))
        yield project_dir
        shutil.rmtree(temp)

    def test_group_without_subcommand_shows_help(self, runner, temp_project):
        result = runner.invoke(app, ["table"])
        assert result.exit_code == 0
        assert "create" in result.stdout

    def test_table_create_and_list(self, runner, temp_project):
        result = runner.invoke(app, ["table", "create", "users", "name:string", "age:int"])
        assert result.exit_code == 0
        assert "Created table 'users'" in result.stdout

        result = runner.invoke(app, ["table", "list"])
        assert result.exit_code == 0
        assert "users" in result.stdout

        table = connect(temp_project).get_table("users")
        assert list(table.columns) == ["id", "name", "age"]

    def test_table_list_empty(self, runner, temp_project):
        result = runner.invoke(app, ["table", "list"])
        assert result.exit_code == 0
        assert "No tables found" in result.stdout

    def test_table_create_with_foreign_key(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users", "name:string"])
        result = runner.invoke(
            app, ["table", "create", "posts", "title:string", "author_id:uuid:fk=users:cascade"]
        )
        assert result.exit_code == 0

        fk = connect(temp_project).get_table("posts").foreign_keys["author_id"]
        assert fk.references == "users.id"
        assert fk.on_delete == "cascade"

    def test_table_create_bad_spec(self, runner, temp_project):
        result = runner.invoke(app, ["table", "create", "users", "name"])
        assert result.exit_code == 1
        assert "Invalid column definition" in result.stdout

    def test_table_create_duplicate(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users"])
        result = runner.invoke(app, ["table", "create", "users"])
        assert result.exit_code == 1
        assert "already exists" in result.stdout

    def test_table_create_missing_name(self, runner, temp_project):
        result = runner.invoke(app, ["table", "create"])
        assert result.exit_code == 1
        assert "Missing argument 'NAME'" in result.stdout

    def test_table_info(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users", "name:string:default=anon"])
        result = runner.invoke(app, ["table", "info", "users"])
        assert result.exit_code == 0
        assert "Table: users" in result.stdout
        assert "anon" in result.stdout

    def test_table_drop_with_confirmation(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users"])

        result = runner.invoke(app, ["table", "drop", "users"], input="n\n")
        assert "Cancelled" in result.stdout
        assert connect(temp_project).tables.table_exists("users")

        result = runner.invoke(app, ["table", "drop", "users"], input="y\n")
        assert result.exit_code == 0
        assert not connect(temp_project).tables.table_exists("users")

    def test_table_drop_referenced(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users"])
        runner.invoke(app, ["table", "create", "posts", "author_id:uuid:fk=users"])
        result = runner.invoke(app, ["table", "drop", "users", "--force"])
        assert result.exit_code == 1
        assert "Cannot drop table" in result.stdout

    def test_column_commands(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users", "name:string"])

        result = runner.invoke(app, ["column", "add", "users", "email:text"])
        assert result.exit_code == 0
        assert "Added column 'email'" in result.stdout

        result = runner.invoke(app, ["column", "list", "users"])
        assert result.exit_code == 0
        assert "email" in result.stdout

        result = runner.invoke(app, ["column", "drop", "users", "email", "--force"])
        assert result.exit_code == 0
        assert "email" not in connect(temp_project).get_table("users").columns

    def test_column_drop_id(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users"])
        result = runner.invoke(app, ["column", "drop", "users", "id", "--force"])
        assert result.exit_code == 1
        assert "protected" in result.stdout

    def test_column_add_missing_table(self, runner, temp_project):
        result = runner.invoke(app, ["column", "add", "ghosts", "name:string"])
        assert result.exit_code == 1
        assert "does not exist" in result.stdout

    def test_data_insert_update_delete(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users", "name:string", "age:number"])

        result = runner.invoke(app, ["data", "insert", "users", "--data", '{"name": "Ada", "age": 36}'])
        assert result.exit_code == 0
        assert "Inserted record" in result.stdout
        row_id = row_id_from_output(result.stdout)

        result = runner.invoke(app, ["data", "update", "users", row_id, "--data", '{"age": 37}'])
        assert result.exit_code == 0
        assert connect(temp_project).get_row("users", row_id)["age"] == 37

        result = runner.invoke(app, ["data", "delete", "users", row_id])
        assert result.exit_code == 0
        assert connect(temp_project).list_rows("users") == []

    def test_data_insert_invalid_json(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users", "name:string"])
        result = runner.invoke(app, ["data", "insert", "users", "--data", "{bad"])
        assert result.exit_code == 1
        assert "Invalid JSON format" in result.stdout

        result = runner.invoke(app, ["data", "insert", "users", "--data", "[1, 2]"])
        assert result.exit_code == 1
        assert "JSON object" in result.stdout

    def test_data_insert_type_mismatch(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users", "age:number"])
        result = runner.invoke(app, ["data", "insert", "users", "--data", '{"age": "old"}'])
        assert result.exit_code == 1
        assert "Failed to insert" in result.stdout

    def test_data_delete_reports_cascade(self, runner, temp_project):
        db = connect(temp_project)
        db.create_table("users", {"name": "string"})
        db.create_table(
            "posts", {"author_id": "uuid"}, {"author_id": {"references": "users", "onDelete": "cascade"}}
        )
        user = db.insert("users", {"name": "Ada"})
        db.insert("posts", {"author_id": user["id"]})

        result = runner.invoke(app, ["data", "delete", "users", user["id"]])
        assert result.exit_code == 0
        assert "Cascaded deletes: 1" in result.stdout

    def test_data_delete_missing_row(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users"])
        result = runner.invoke(app, ["data", "delete", "users", "nope"])
        assert result.exit_code == 1
        assert "Failed to delete" in result.stdout

    def test_data_list(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users", "name:string"])
        result = runner.invoke(app, ["data", "list", "users"])
        assert "No rows" in result.stdout

        runner.invoke(app, ["data", "insert", "users", "--data", '{"name": "Ada"}'])
        result = runner.invoke(app, ["data", "list", "users", "--format", "json"])
        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert [row["name"] for row in rows] == ["Ada"]

    def test_snapshot_export_and_import(self, runner, temp_project):
        runner.invoke(app, ["table", "create", "users", "name:string"])
        runner.invoke(app, ["data", "insert", "users", "--data", '{"name": "Ada"}'])

        result = runner.invoke(app, ["snapshot", "export"])
        assert result.exit_code == 0
        document = json.loads(result.stdout)
        assert "users" in document["tables"]

        backup = temp_project / "backup.json"
        result = runner.invoke(app, ["snapshot", "export", "--output", str(backup)])
        assert result.exit_code == 0
        assert backup.exists()

        runner.invoke(app, ["table", "create", "orders"])
        result = runner.invoke(app, ["snapshot", "import", str(backup), "--overwrite"])
        assert result.exit_code == 0
        assert [t.name for t in connect(temp_project).list_tables()] == ["users"]

    def test_snapshot_import_invalid(self, runner, temp_project):
        bad = temp_project / "bad.json"
        bad.write_text('{"tables": {}}')
        result = runner.invoke(app, ["snapshot", "import", str(bad)])
        assert result.exit_code == 1
        assert "Import failed" in result.stdout

    def test_command_outside_project(self, runner, monkeypatch):
        temp = tempfile.mkdtemp()
        try:
            monkeypatch.setenv("MINIDB_PROJECT_DIR", temp)
            result = runner.invoke(app, ["table", "list"])
            assert result.exit_code == 1
            assert "minidb init" in result.stdout
        finally:
            shutil.rmtree(temp)
