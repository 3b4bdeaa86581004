"""Utility functions for CLI commands."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table as RichTable

from minidb.config import Config, ProjectConfig
from minidb.core.database import MiniDB
from minidb.core.path_utils import get_project_root
from minidb.core.storage import FileBlobStore
from minidb.errors import MiniDBError
from minidb.utils.type_utils import coerce_for_column, normalize_type, parse_literal

console = Console()

FK_POLICIES = {
    "restrict": "restrict",
    "cascade": "cascade",
    "set-null": "set-null",
    "set_null": "set-null",
    "setnull": "set-null",
    "set null": "set-null",
}


def print_error(message: Any) -> None:
    """Print an error line in red."""
    console.print(f"[red]❌ {escape(str(message))}[/red]")


def configure_logging(level: str) -> None:
    """Send log records to stderr at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def get_config_with_data() -> Tuple[Config, ProjectConfig]:
    """Get config and load data from the project directory.

    The project is MINIDB_PROJECT_DIR when set, otherwise the nearest
    directory at or above the current one that holds ``.minidb``.

    Returns:
        tuple: (config, config_data)
    """
    if os.environ.get("MINIDB_PROJECT_DIR"):
        config = Config()
    else:
        try:
            project_root = get_project_root(Path.cwd())
        except FileNotFoundError:
            console.print("[red]❌ Not in a MiniDB project directory. Run 'minidb init' first.[/red]")
            raise typer.Exit(1)
        config = Config(project_root)

    try:
        config_data = config.load()
    except FileNotFoundError:
        console.print("[red]❌ Config file not found. Run 'minidb init' first.[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(1)

    configure_logging(config_data.log_level)
    return config, config_data


def get_minidb_instance() -> MiniDB:
    """Open the database of the current project.

    Raises:
        typer.Exit: If there is no project or the stored snapshot is unreadable
    """
    config, config_data = get_config_with_data()
    try:
        return MiniDB(
            blob_store=FileBlobStore(config.data_path),
            snapshot_key=config_data.snapshot_key,
            project_dir=config.project_dir,
        )
    except MiniDBError as e:
        print_error(e)
        raise typer.Exit(1)


def validate_required_arg(
    value: Optional[str], arg_name: str, ctx: typer.Context
) -> str:
    """Validate a required argument and show help if missing.

    Args:
        value: The argument value
        arg_name: Name of the argument (for error message)
        ctx: Typer context

    Returns:
        The validated value

    Raises:
        typer.Exit: If value is None
    """
    if value is None:
        console.print(ctx.get_help())
        console.print(f"\n[red]❌ Error: Missing argument '{arg_name.upper()}'.[/red]")
        raise typer.Exit(1)
    return value


def parse_column_spec(spec: str) -> Dict[str, Any]:
    """Parse a ``name:type[:default=value][:fk=table[.column][:policy]]`` spec.

    Returns:
        dict with ``name``, ``type``, ``default`` and ``foreign_key`` (a dict
        with ``references`` and ``onDelete``, or None)

    Raises:
        ValueError: If the spec is malformed
    """
    parts = spec.split(":")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(
            f"Invalid column definition: '{spec}'. "
            f"Format: name:type[:default=value][:fk=table[.column][:policy]]"
        )

    name = parts[0]
    column_type = normalize_type(parts[1])
    default = None
    foreign_key = None

    for part in parts[2:]:
        lowered = part.lower()
        if lowered.startswith("default="):
            text = part[len("default="):]
            default = coerce_for_column(column_type, parse_literal(text), text)
        elif lowered.startswith("fk="):
            references = part[3:]
            if not references:
                raise ValueError(f"Invalid foreign key in '{spec}'. Format: fk=table[.column]")
            foreign_key = {"references": references, "onDelete": "restrict"}
        elif lowered in FK_POLICIES:
            if foreign_key is None:
                raise ValueError(f"Delete policy '{part}' in '{spec}' must follow fk=...")
            foreign_key["onDelete"] = FK_POLICIES[lowered]
        else:
            raise ValueError(f"Unknown column option '{part}' in '{spec}'")

    return {"name": name, "type": column_type, "default": default, "foreign_key": foreign_key}


def format_value(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_records(records: List[Dict[str, Any]], title: str) -> None:
    """Print records as a rich table, columns in first-seen order."""
    columns: List[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)

    table = RichTable(title=title, title_justify="left")
    for column in columns:
        table.add_column(column, style="cyan")
    for record in records:
        table.add_row(*[format_value(record.get(column)) if column in record else "" for column in columns])
    console.print(table)


def show_env_config():
    """Display active environment variable configuration."""
    env_vars = {
        "MINIDB_PROJECT_DIR": os.environ.get("MINIDB_PROJECT_DIR"),
        "MINIDB_SNAPSHOT_KEY": os.environ.get("MINIDB_SNAPSHOT_KEY"),
        "MINIDB_LOG_LEVEL": os.environ.get("MINIDB_LOG_LEVEL"),
    }

    active = {k: v for k, v in env_vars.items() if v}
    if active:
        console.print("\n[yellow]Active environment variables:[/yellow]")
        for key, value in active.items():
            console.print(f"  {key}={value}")
    else:
        console.print("\n[dim]No MiniDB environment variables set[/dim]")
