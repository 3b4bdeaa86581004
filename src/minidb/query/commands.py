"""Typed commands produced by the query parser.

The parser turns one query line into exactly one of these dataclasses; the
query manager executes them against the store.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Literal:
    """A value written in a query.

    Attributes:
        value: Typed value (number, boolean, string or None)
        text: Text as written, without quotes
    """
    value: Any
    text: str


@dataclass(frozen=True)
class Condition:
    """WHERE condition: ``field op value``."""
    field: str
    op: str
    value: Literal


class Command:
    """Base class marker for all commands."""


@dataclass(frozen=True)
class SelectCommand(Command):
    """SELECT statement. ``fields`` is None for a full projection."""
    table: str
    fields: Optional[Tuple[str, ...]] = None
    where: Optional[Condition] = None
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None


@dataclass(frozen=True)
class InsertCommand(Command):
    """INSERT statement with its decoded JSON payload."""
    table: str
    payload: Dict[str, Any]


@dataclass(frozen=True)
class UpdateCommand(Command):
    """UPDATE statement with a single assignment."""
    table: str
    field: str
    value: Literal
    where: Optional[Condition] = None


@dataclass(frozen=True)
class DeleteCommand(Command):
    """DELETE statement."""
    table: str
    where: Optional[Condition] = None


@dataclass(frozen=True)
class JoinCommand(Command):
    """Inner join of two tables on ``left_table.left_field = right_table.right_field``."""
    left_table: str
    right_table: str
    left_field: str
    right_field: str


class SetOperation(str, Enum):
    """Set operations over the records of two tables."""

    UNION = "union"
    INTERSECT = "intersect"
    DIFFERENCE = "difference"


@dataclass(frozen=True)
class SetOpCommand(Command):
    """UNION, INTERSECT or DIFFERENCE of two tables."""
    op: SetOperation
    left_table: str
    right_table: str


@dataclass(frozen=True)
class ShowTablesCommand(Command):
    """SHOW TABLES / SHOW FILES."""
