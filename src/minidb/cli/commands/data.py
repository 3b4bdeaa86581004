"""Data manipulation commands for MiniDB CLI."""

import json

import typer
from rich.console import Console

from minidb.cli.utils import get_minidb_instance, print_error, render_records
from minidb.errors import MiniDBError

app = typer.Typer(help="Data manipulation commands", invoke_without_command=True)
console = Console()


@app.callback()
def callback(ctx: typer.Context):
    """Show help when no subcommand is provided."""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


def _parse_object(data: str) -> dict:
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as e:
        print_error(f"Invalid JSON format: {e}")
        raise typer.Exit(1)
    if not isinstance(parsed, dict):
        console.print("[red]❌ Data must be a JSON object[/red]")
        raise typer.Exit(1)
    return parsed


@app.command()
def insert(
    table_name: str = typer.Argument(..., help="Name of table to insert into"),
    data: str = typer.Option(..., "--data", "-d", help="JSON object to insert"),
):
    """Insert a single record into a table using JSON data.

    Examples:
        minidb data insert users --data '{"name": "Alice", "age": 30}'
    """
    record = _parse_object(data)
    db = get_minidb_instance()

    try:
        row = db.insert(table_name, record)
    except MiniDBError as e:
        print_error(f"Failed to insert: {e}")
        raise typer.Exit(1)

    console.print(f"[green]✅ Inserted record into '{table_name}'[/green]")
    console.print(f"[cyan]   ID: {row['id']}[/cyan]")


@app.command()
def update(
    table_name: str = typer.Argument(..., help="Name of table"),
    row_id: str = typer.Argument(..., help="ID of the row to update"),
    data: str = typer.Option(..., "--data", "-d", help="JSON object of column values"),
):
    """Update one row by id.

    Examples:
        minidb data update users 3f1c... --data '{"age": 31}'
    """
    changes = _parse_object(data)
    db = get_minidb_instance()

    try:
        db.update(table_name, row_id, changes)
    except MiniDBError as e:
        print_error(f"Failed to update: {e}")
        raise typer.Exit(1)

    console.print(f"[green]✅ Updated record '{row_id}' in '{table_name}'[/green]")


@app.command()
def delete(
    table_name: str = typer.Argument(..., help="Name of table"),
    row_id: str = typer.Argument(..., help="ID of the row to delete"),
):
    """Delete one row by id, applying foreign-key delete policies."""
    db = get_minidb_instance()

    try:
        plan = db.delete(table_name, row_id)
    except MiniDBError as e:
        print_error(f"Failed to delete: {e}")
        raise typer.Exit(1)

    console.print(f"[green]✅ Deleted record '{row_id}' from '{table_name}'[/green]")
    cascaded = len(plan.deleted) - 1
    if cascaded:
        console.print(f"[cyan]   Cascaded deletes: {cascaded}[/cyan]")
    if plan.nullified:
        console.print(f"[cyan]   References set to null: {len(plan.nullified)}[/cyan]")


@app.command(name="list")
def list_rows(
    table_name: str = typer.Argument(..., help="Name of table"),
    format: str = typer.Option("table", "--format", "-f", help="Output format (table, json)"),
):
    """List every row of a table."""
    db = get_minidb_instance()

    try:
        rows = db.list_rows(table_name)
    except MiniDBError as e:
        print_error(e)
        raise typer.Exit(1)

    if not rows:
        console.print("[yellow]No rows[/yellow]")
        return

    if format == "json":
        console.print_json(data=rows)
    else:
        render_records(rows, f"{table_name} ({len(rows)} rows)")
