"""Query execution command for MiniDB CLI."""

import typer
from rich.console import Console

from minidb.cli.utils import get_minidb_instance, print_error, render_records
from minidb.models import ResultKind

console = Console()

MUTATING_KEYWORDS = ("INSERT", "UPDATE", "DELETE")


def execute_query(sql: str, format: str = "table") -> None:
    """Execute one query and print its result."""
    db = get_minidb_instance()
    result = db.query(sql)

    if not result.ok:
        print_error(f"Query error: {result.error}")
        raise typer.Exit(1)

    words = sql.strip().split(None, 1)
    is_mutation = bool(words) and words[0].upper() in MUTATING_KEYWORDS

    if format == "json":
        console.print_json(data=result.to_dict())
        return

    if is_mutation:
        console.print(
            f"[green]✅ Query executed successfully[/green]\n"
            f"[cyan]Rows affected: {result.affected_row_count}[/cyan]"
        )
        return

    rows = result.data
    if not rows:
        console.print("[yellow]No results[/yellow]")
        return

    if result.result_kind == ResultKind.TABLES:
        title = f"Tables ({len(rows)})"
    else:
        title = f"Query Results ({len(rows)} rows)"
    render_records(rows, title)
