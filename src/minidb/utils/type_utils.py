"""Type utilities for column types and loosely-typed row values.

Row values are plain JSON values (``str``, ``int``/``float``, ``bool``,
``None``, or nested lists/dicts). The helpers here classify them, compare them
without Python's implicit ``True == 1`` coercion, and check them against a
column's declared type.
"""

import math
import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from minidb.errors import TypeMismatchError

# Map various type representations to canonical MiniDB types
TYPE_MAPPING = {
    # Canonical names
    "string": "string",
    "number": "number",
    "boolean": "boolean",
    "date": "date",
    "uuid": "uuid",

    # Common aliases
    "str": "string",
    "text": "string",
    "varchar": "string",
    "char": "string",
    "int": "number",
    "integer": "number",
    "float": "number",
    "double": "number",
    "real": "number",
    "numeric": "number",
    "bool": "boolean",
    "datetime": "date",
    "timestamp": "date",
    "guid": "uuid",
}

CREATED_AT_COLUMNS = ("createdAt", "created_at")

NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
HEX_PATTERN = re.compile(r"^0[xX][0-9a-fA-F]+$")


class _Missing:
    """Marker for a field that is absent from a record."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


class ValueKind(str, Enum):
    """Kinds a stored value can have."""

    MISSING = "missing"
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    JSON = "json"


def normalize_type(type_str: str) -> str:
    """
    Normalize a type string to its canonical MiniDB type.

    Args:
        type_str: The type string to normalize (case-insensitive, supports aliases)

    Returns:
        The canonical type (string, number, boolean, date, uuid)

    Raises:
        ValueError: If the type string is not recognized
    """
    if not type_str:
        raise ValueError("Type cannot be empty")

    normalized = TYPE_MAPPING.get(type_str.strip().lower())
    if not normalized:
        valid_types = sorted(set(TYPE_MAPPING.values()))
        raise ValueError(
            f"Invalid type: '{type_str}'. "
            f"Valid types: {', '.join(valid_types)}"
        )
    return normalized


def value_kind(value: Any) -> ValueKind:
    """Classify a stored value."""
    if value is MISSING:
        return ValueKind.MISSING
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, so it must be checked first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    return ValueKind.JSON


def parse_literal(text: str) -> Any:
    """Convert literal query text to a typed value.

    Numeric text becomes a number (``int`` when written without a fraction or
    exponent), ``true``/``false`` become booleans and ``null`` becomes None, all
    case-insensitively. Anything else is a string with one pair of surrounding
    quotes removed.
    """
    trimmed = text.strip()
    if NUMBER_PATTERN.match(trimmed):
        if re.search(r"[.eE]", trimmed):
            return float(trimmed)
        return int(trimmed)

    lowered = trimmed.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None

    if len(trimmed) >= 2 and trimmed[0] == trimmed[-1] and trimmed[0] in ("'", '"'):
        return trimmed[1:-1]
    return trimmed


def to_number(value: Any) -> float:
    """Coerce a value to a number the way ordering comparisons need it.

    Null, booleans, numbers and numeric strings convert; everything else is NaN,
    which makes every ordering comparison false.
    """
    kind = value_kind(value)
    if kind == ValueKind.NULL:
        return 0.0
    if kind == ValueKind.BOOLEAN:
        return 1.0 if value else 0.0
    if kind == ValueKind.NUMBER:
        return float(value)
    if kind == ValueKind.STRING:
        stripped = value.strip()
        if not stripped:
            return 0.0
        if NUMBER_PATTERN.match(stripped):
            return float(stripped)
        if HEX_PATTERN.match(stripped):
            return float(int(stripped, 16))
    return math.nan


def to_text(value: Any) -> str:
    """Render a value as text for pattern matching."""
    kind = value_kind(value)
    if kind in (ValueKind.MISSING, ValueKind.NULL):
        return ""
    if kind == ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind == ValueKind.NUMBER and isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def strict_equals(left: Any, right: Any) -> bool:
    """Compare two values without cross-kind coercion.

    ``True`` never equals ``1`` and ``"1"`` never equals ``1``; ``1`` and ``1.0``
    are both numbers and compare equal.
    """
    if value_kind(left) != value_kind(right):
        return False
    return left == right


def compare_values(left: Any, right: Any) -> int:
    """Two-way comparison used for sorting.

    Strings compare lexically with each other; every other pairing compares
    numerically. Pairs that cannot be ordered compare as equal.
    """
    if value_kind(left) == ValueKind.STRING and value_kind(right) == ValueKind.STRING:
        if left < right:
            return -1
        if left > right:
            return 1
        return 0

    left_num, right_num = to_number(left), to_number(right)
    if left_num < right_num:
        return -1
    if left_num > right_num:
        return 1
    return 0


def like_to_regex(pattern: str) -> "re.Pattern[str]":
    """Translate a LIKE pattern (``%`` and ``_`` wildcards) into a regex."""
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def matches_like(value: Any, pattern: Any) -> bool:
    """Check a value against a LIKE pattern, case-insensitively."""
    return like_to_regex(to_text(pattern)).fullmatch(to_text(value)) is not None


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 date or timestamp, accepting a trailing ``Z``."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def now_iso() -> str:
    """Current UTC instant as an ISO 8601 string."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def is_valid_for_type(column_type: str, value: Any) -> bool:
    """Check whether a non-null value satisfies a canonical column type."""
    if value is None:
        return True

    kind = value_kind(value)
    if column_type == "string":
        return kind == ValueKind.STRING
    if column_type == "number":
        return kind == ValueKind.NUMBER and not math.isnan(value)
    if column_type == "boolean":
        return kind == ValueKind.BOOLEAN
    if column_type == "date":
        if kind != ValueKind.STRING:
            return False
        try:
            parse_iso_datetime(value)
        except ValueError:
            return False
        return True
    if column_type == "uuid":
        if kind != ValueKind.STRING:
            return False
        try:
            uuid.UUID(value)
        except ValueError:
            return False
        return True
    return False


def validate_value(table_name: str, column_name: str, column_type: str, value: Any) -> None:
    """Raise TypeMismatchError if ``value`` does not fit ``column_type``."""
    if not is_valid_for_type(column_type, value):
        raise TypeMismatchError(
            f"Column '{table_name}.{column_name}' must be of type {column_type}, "
            f"got {value_kind(value).value} {value!r}"
        )


def coerce_for_column(column_type: str, value: Any, text: str) -> Any:
    """Coerce a parsed query literal to the column it is assigned to.

    Only string columns coerce: a literal that parsed as a number or boolean is
    stored as the text it was written as.
    """
    if value is None:
        return None
    if column_type == "string" and not isinstance(value, str):
        return text.strip()
    return value
