"""Column management commands for MiniDB CLI."""

import typer
from typing import Optional
from rich.console import Console
from rich.table import Table as RichTable

from minidb.cli.utils import (
    get_minidb_instance,
    parse_column_spec,
    print_error,
    validate_required_arg,
)
from minidb.errors import MiniDBError

app = typer.Typer(help="Column management commands", invoke_without_command=True)
console = Console()


@app.callback()
def callback(ctx: typer.Context):
    """Show help when no subcommand is provided."""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


@app.command(name="list")
def list_columns(
    ctx: typer.Context,
    table: Optional[str] = typer.Argument(None, help="Table name"),
):
    """List all columns in a table."""
    table = validate_required_arg(table, "table", ctx)
    db = get_minidb_instance()

    try:
        columns = db.columns.list_columns(table)
    except MiniDBError as e:
        print_error(e)
        raise typer.Exit(1)

    col_table = RichTable(title=f"Columns in '{table}'", title_justify="left")
    col_table.add_column("Name", style="cyan")
    col_table.add_column("Type", style="green")
    col_table.add_column("Primary", style="yellow")
    col_table.add_column("Default", style="magenta")

    for column in columns:
        col_table.add_row(
            column.name,
            column.type,
            "Yes" if column.primary else "No",
            "" if column.default is None else str(column.default),
        )

    console.print(col_table)


@app.command()
def add(
    ctx: typer.Context,
    table: Optional[str] = typer.Argument(None, help="Table name"),
    spec: Optional[str] = typer.Argument(
        None, help="Column definition (format: name:type[:default=value][:fk=table[.column][:policy]])"
    ),
):
    """Add a column to a table. Existing rows get null.

    Examples:
        minidb column add users email:string
        minidb column add posts editor_id:uuid:fk=users:set-null
    """
    table = validate_required_arg(table, "table", ctx)
    spec = validate_required_arg(spec, "spec", ctx)

    try:
        parsed = parse_column_spec(spec)
    except (MiniDBError, ValueError) as e:
        print_error(e)
        raise typer.Exit(1)

    db = get_minidb_instance()
    try:
        column = db.add_column(
            table,
            parsed["name"],
            parsed["type"],
            default=parsed["default"],
            foreign_key=parsed["foreign_key"],
        )
    except MiniDBError as e:
        print_error(e)
        raise typer.Exit(1)

    console.print(f"[green]✅ Added column '{column.name}' ({column.type}) to '{table}'[/green]")


@app.command()
def drop(
    ctx: typer.Context,
    table: Optional[str] = typer.Argument(None, help="Table name"),
    name: Optional[str] = typer.Argument(None, help="Column to drop"),
    force: bool = typer.Option(False, "--force", "-f", help="Force deletion without confirmation"),
):
    """Drop a column and its values from every row."""
    table = validate_required_arg(table, "table", ctx)
    name = validate_required_arg(name, "name", ctx)

    if not force:
        confirm = typer.confirm(f"Are you sure you want to drop column '{name}' from '{table}'?")
        if not confirm:
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    db = get_minidb_instance()
    try:
        db.drop_column(table, name)
    except MiniDBError as e:
        print_error(e)
        raise typer.Exit(1)

    console.print(f"[green]✅ Dropped column '{name}' from '{table}'[/green]")
