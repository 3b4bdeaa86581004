"""Name validation utilities for MiniDB entities.

Table names are case-normalised to lowercase; column names keep their case.
Both must be plain identifiers so the query language can address them.
"""

import re

from minidb.errors import SchemaError


# Table names: lowercase identifiers, must start with a letter
VALID_TABLE_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")

# Column names: identifiers, case preserved
VALID_COLUMN_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

MAX_NAME_LENGTH = 63

# Query keywords cannot be used as table names
RESERVED_NAMES = {
    "select",
    "from",
    "where",
    "orderby",
    "sortby",
    "asc",
    "desc",
    "limit",
    "insert",
    "into",
    "update",
    "set",
    "delete",
    "join",
    "on",
    "union",
    "intersect",
    "diff",
    "difference",
    "show",
    "tables",
    "files",
    "like",
}


class InvalidNameError(SchemaError, ValueError):
    """Raised when a name doesn't meet validation requirements."""

    pass


def normalize_table_name(name: str) -> str:
    """Case-normalise a table name."""
    return name.strip().lower()


def validate_name(name: str, entity_type: str = "table") -> None:
    """Validate that a table or column name meets MiniDB naming requirements.

    Args:
        name: The name to validate (table names must already be normalised)
        entity_type: "table" or "column"

    Raises:
        InvalidNameError: If the name is invalid
    """
    if not name:
        raise InvalidNameError(f"{entity_type.capitalize()} name cannot be empty")

    if len(name) > MAX_NAME_LENGTH:
        raise InvalidNameError(
            f"{entity_type.capitalize()} name cannot exceed {MAX_NAME_LENGTH} characters"
        )

    if entity_type == "table":
        if name != name.lower():
            raise InvalidNameError(
                f"Table name must be lowercase. Use '{name.lower()}' instead of '{name}'"
            )
        if not VALID_TABLE_NAME_PATTERN.match(name):
            raise InvalidNameError(
                f"Invalid table name '{name}'. "
                f"Table names must contain only lowercase letters (a-z), "
                f"numbers (0-9), and underscore (_), and must start with a letter."
            )
        if name in RESERVED_NAMES:
            raise InvalidNameError(
                f"'{name}' is a reserved word and cannot be used as a table name"
            )
    else:
        if not VALID_COLUMN_NAME_PATTERN.match(name):
            raise InvalidNameError(
                f"Invalid {entity_type} name '{name}'. "
                f"Names must contain only letters, numbers and underscore (_), "
                f"and cannot start with a number."
            )


def is_valid_name(name: str, entity_type: str = "table") -> bool:
    """Check if a name is valid without raising an exception.

    Args:
        name: The name to check
        entity_type: "table" or "column"

    Returns:
        True if valid, False otherwise
    """
    try:
        validate_name(name, entity_type)
        return True
    except InvalidNameError:
        return False
