"""Fast integration tests for CLI commands using CliRunner."""

import json
import os
import pytest
import tempfile
import shutil
from pathlib import Path
from typer.testing import CliRunner

# Import the app directly
from minidb.cli.main import app

runner = CliRunner()


class TestCLIIntegration:
    """Fast CLI integration tests using CliRunner."""

    @pytest.fixture
    def temp_project(self):
        """Create a temporary project directory."""
        temp_dir = tempfile.mkdtemp()
        project_path = Path(temp_dir)
        yield project_path
        shutil.rmtree(temp_dir)

    def run_in_project(self, command, temp_project):
        """Run a command in the project directory."""
        original_cwd = os.getcwd()
        os.chdir(temp_project)
        try:
            return runner.invoke(app, command)
        finally:
            os.chdir(original_cwd)

    def test_project_initialization(self, temp_project):
        """Test project initialization workflow."""
        result = self.run_in_project(["init"], temp_project)
        assert result.exit_code == 0
        assert "Initialized MiniDB project" in result.stdout

        assert (temp_project / ".minidb" / "config.toml").exists()
        assert (temp_project / ".minidb" / "data" / "minidb.json").exists()

        result = self.run_in_project(["status"], temp_project)
        assert result.exit_code == 0
        assert "Tables: 0" in result.stdout

    def test_commands_from_subdirectory(self, temp_project):
        """Commands find the project from a nested directory."""
        self.run_in_project(["init"], temp_project)
        nested = temp_project / "app" / "src"
        nested.mkdir(parents=True)

        result = self.run_in_project(["table", "create", "users", "name:string"], nested)
        assert result.exit_code == 0

        result = self.run_in_project(["table", "list"], temp_project)
        assert "users" in result.stdout

    def test_schema_data_query_workflow(self, temp_project):
        """Build a schema, load rows and query them through the CLI only."""
        self.run_in_project(["init"], temp_project)

        steps = [
            ["table", "create", "authors", "name:string"],
            ["table", "create", "books", "title:string", "year:int", "author_id:uuid:fk=authors:cascade"],
            ["query", 'INSERT INTO authors {"name": "Le Guin"}'],
        ]
        for command in steps:
            result = self.run_in_project(command, temp_project)
            assert result.exit_code == 0, result.stdout

        result = self.run_in_project(
            ["query", "SELECT id FROM authors", "--format", "json"], temp_project
        )
        author_id = json.loads(result.stdout)["data"][0]["id"]

        for title, year in (("Earthsea", 1968), ("The Dispossessed", 1974)):
            payload = json.dumps({"title": title, "year": year, "author_id": author_id})
            result = self.run_in_project(["data", "insert", "books", "--data", payload], temp_project)
            assert result.exit_code == 0, result.stdout

        result = self.run_in_project(
            ["query", "SELECT title FROM books WHERE year > 1970", "--format", "json"], temp_project
        )
        assert json.loads(result.stdout)["data"] == [{"title": "The Dispossessed"}]

        result = self.run_in_project(["query", "DELETE FROM authors"], temp_project)
        assert result.exit_code == 0
        assert "Rows affected: 1" in result.stdout

        result = self.run_in_project(["query", "SHOW TABLES", "--format", "json"], temp_project)
        counts = {row["name"]: row["rowCount"] for row in json.loads(result.stdout)["data"]}
        assert counts == {"authors": 0, "books": 0}

    def test_dangling_foreign_key_rejected(self, temp_project):
        self.run_in_project(["init"], temp_project)
        self.run_in_project(["table", "create", "authors", "name:string"], temp_project)
        self.run_in_project(["table", "create", "books", "author_id:uuid:fk=authors"], temp_project)

        payload = json.dumps({"author_id": "3f1c2a9e-8d4b-4c3e-9f7a-1b2c3d4e5f60"})
        result = self.run_in_project(["data", "insert", "books", "--data", payload], temp_project)
        assert result.exit_code == 1
        assert "Foreign key violation" in result.stdout
