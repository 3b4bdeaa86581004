"""Snapshot import and export commands for MiniDB CLI."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from minidb.cli.utils import get_minidb_instance, print_error
from minidb.errors import MiniDBError

app = typer.Typer(help="Snapshot import and export", invoke_without_command=True)
console = Console()


@app.callback()
def callback(ctx: typer.Context):
    """Show help when no subcommand is provided."""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


@app.command()
def export(
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="File to write (default: print to stdout)"
    ),
):
    """Export the whole database as a JSON snapshot."""
    db = get_minidb_instance()

    if output is None:
        typer.echo(db.export_snapshot())
        return

    try:
        db.snapshots.export_to_file(output)
    except MiniDBError as e:
        print_error(e)
        raise typer.Exit(1)

    console.print(f"[green]✅ Exported snapshot to {output}[/green]")


@app.command(name="import")
def import_snapshot(
    file: Path = typer.Argument(..., help="Snapshot JSON file"),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Replace the database instead of merging into it"
    ),
):
    """Import a JSON snapshot, merging tables by name unless --overwrite is given."""
    db = get_minidb_instance()

    try:
        snapshot = db.snapshots.import_file(file, overwrite=overwrite)
    except MiniDBError as e:
        print_error(f"Import failed: {e}")
        raise typer.Exit(1)

    mode = "Replaced database with" if overwrite else "Merged"
    console.print(
        f"[green]✅ {mode} snapshot from {file} ({len(snapshot.tables)} tables)[/green]"
    )
