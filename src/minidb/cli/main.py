"""Main CLI entry point for MiniDB."""

import typer
from typing import Optional
from pathlib import Path

# Import command groups
from minidb.cli.commands import (
    table,
    column,
    data,
    snapshot,
)

app = typer.Typer(
    name="minidb",
    help="MiniDB - An embedded relational store with a small query language",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """
    MiniDB - An embedded relational store with a small query language
    """
    if ctx.invoked_subcommand is None:
        # No subcommand was invoked, show help
        print(ctx.get_help())
        raise typer.Exit(0)


# Add command groups
app.add_typer(table.app, name="table", help="Table management commands")
app.add_typer(column.app, name="column", help="Column management commands")
app.add_typer(data.app, name="data", help="Data manipulation commands")
app.add_typer(snapshot.app, name="snapshot", help="Snapshot import and export")


@app.command()
def query(
    sql: str = typer.Argument(..., help="Query to execute"),
    format: Optional[str] = typer.Option(
        "table", "--format", "-f", help="Output format (table, json)"
    ),
):
    """Execute a query.

    Examples:
        minidb query "SELECT * FROM users WHERE age > 30 ORDER BY name LIMIT 5"
        minidb query 'INSERT INTO users {"name": "Ada"}'
        minidb query "SHOW TABLES"
    """
    from minidb.cli.commands.query import execute_query

    execute_query(sql, format)


@app.command()
def init(
    path: Optional[Path] = typer.Argument(
        None, help="Directory to initialize project in (default: current directory)"
    ),
    snapshot_key: Optional[str] = typer.Option(
        "minidb", "--snapshot-key", "-k", help="Key the snapshot is stored under"
    ),
):
    """Initialize a new MiniDB project."""
    from minidb.core.initializer import init_project

    project_path = path or Path.cwd()

    try:
        init_project(project_dir=project_path, snapshot_key=snapshot_key)
        typer.secho(
            f"✅ Initialized MiniDB project in {project_path}", fg=typer.colors.GREEN
        )
        typer.secho(f"   Snapshot key: {snapshot_key}", fg=typer.colors.CYAN)
    except FileExistsError:
        typer.secho(f"❌ Project already exists in {project_path}", fg=typer.colors.RED)
        raise typer.Exit(1)
    except ValueError as e:
        typer.secho(f"❌ {e}", fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command()
def version():
    """Show MiniDB version."""
    from minidb import __version__

    typer.echo(f"MiniDB version {__version__}")


@app.command()
def status():
    """Show MiniDB status including configuration and environment variables."""
    from minidb.cli.utils import get_config_with_data, get_minidb_instance, show_env_config
    from rich.console import Console

    console = Console()

    config, config_data = get_config_with_data()
    db = get_minidb_instance()
    current = db.snapshot

    console.print("\n[bold]MiniDB Status[/bold]")
    console.print(f"Project: {config.project_dir}")
    console.print(f"Snapshot Key: {config_data.snapshot_key}")
    console.print(f"Data Directory: {config.data_path}")
    console.print(f"Tables: {len(current.tables)}")
    console.print(f"Last Updated: {current.meta.updated_at or '-'}")

    # Show environment variables
    show_env_config()


if __name__ == "__main__":
    app()
