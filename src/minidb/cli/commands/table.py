"""Table management commands for MiniDB CLI."""

import typer
from typing import List, Optional
from rich.console import Console
from rich.table import Table as RichTable

from minidb.cli.utils import (
    get_minidb_instance,
    parse_column_spec,
    print_error,
    validate_required_arg,
)
from minidb.errors import MiniDBError

app = typer.Typer(help="Table management commands", invoke_without_command=True)
console = Console()


@app.callback()
def callback(ctx: typer.Context):
    """Show help when no subcommand is provided."""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


@app.command(name="list")
def list_tables():
    """List all tables in the database."""
    db = get_minidb_instance()
    tables = db.list_tables()

    if not tables:
        console.print("[yellow]No tables found[/yellow]")
        return

    table = RichTable(title="Tables", title_justify="left")
    table.add_column("Name", style="cyan")
    table.add_column("Columns", style="green")
    table.add_column("Rows", style="yellow")

    for tbl in tables:
        table.add_row(tbl.name, str(len(tbl.columns)), str(tbl.row_count))

    console.print(table)


@app.command()
def create(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Name of the table"),
    columns: Optional[List[str]] = typer.Argument(
        None,
        help="Column definitions (format: name:type[:default=value][:fk=table[.column][:policy]])",
    ),
):
    """Create a new table.

    Column format: name:type[:default=value][:fk=table[.column][:policy]]
    Types: string, number, boolean, date, uuid
    Type aliases: str, text, int, float, bool, datetime, etc.
    Delete policies: restrict (default), cascade, set-null
    Note: The id column is added automatically.

    Examples:
        minidb table create users name:string age:number
        minidb table create posts title:string author_id:uuid:fk=users:cascade
        minidb table create tasks done:boolean:default=false
    """
    name = validate_required_arg(name, "name", ctx)
    columns = columns or []
    if not columns:
        console.print("[yellow]Creating table with only the id column[/yellow]")

    column_defs = {}
    foreign_keys = {}
    for spec in columns:
        try:
            parsed = parse_column_spec(spec)
        except (MiniDBError, ValueError) as e:
            print_error(e)
            raise typer.Exit(1)
        column_defs[parsed["name"]] = {"type": parsed["type"], "default": parsed["default"]}
        if parsed["foreign_key"]:
            foreign_keys[parsed["name"]] = parsed["foreign_key"]

    db = get_minidb_instance()
    try:
        created = db.create_table(name, column_defs, foreign_keys)
    except MiniDBError as e:
        print_error(e)
        raise typer.Exit(1)

    console.print(
        f"[green]✅ Created table '{created.name}' with {len(created.columns)} columns[/green]"
    )


@app.command()
def drop(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Name of the table to drop"),
    force: bool = typer.Option(False, "--force", "-f", help="Force deletion without confirmation"),
):
    """Drop a table and all of its rows."""
    name = validate_required_arg(name, "name", ctx)

    if not force:
        confirm = typer.confirm(f"Are you sure you want to drop table '{name}'?")
        if not confirm:
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    db = get_minidb_instance()
    try:
        db.drop_table(name)
    except MiniDBError as e:
        print_error(e)
        raise typer.Exit(1)

    console.print(f"[green]✅ Dropped table '{name}'[/green]")


@app.command()
def info(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Table name"),
):
    """Show the columns and foreign keys of a table."""
    name = validate_required_arg(name, "name", ctx)
    db = get_minidb_instance()

    try:
        table = db.get_table(name)
    except MiniDBError as e:
        print_error(e)
        raise typer.Exit(1)

    console.print(f"\n[bold]Table: {table.name}[/bold]")
    console.print(f"Rows: {table.row_count}")

    col_table = RichTable(title="Columns", title_justify="left")
    col_table.add_column("Name", style="cyan")
    col_table.add_column("Type", style="green")
    col_table.add_column("Primary", style="yellow")
    col_table.add_column("Default", style="magenta")
    col_table.add_column("References", style="blue")

    for column in table.columns.values():
        fk = table.foreign_keys.get(column.name)
        col_table.add_row(
            column.name,
            column.type,
            "Yes" if column.primary else "No",
            "" if column.default is None else str(column.default),
            f"{fk.references} ({fk.on_delete})" if fk else "",
        )

    console.print(col_table)
