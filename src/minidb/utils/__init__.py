"""Utility modules for MiniDB."""

from minidb.utils.name_validator import (
    validate_name,
    is_valid_name,
    normalize_table_name,
    InvalidNameError,
)
from minidb.utils.type_utils import (
    normalize_type,
    parse_literal,
    strict_equals,
    compare_values,
    to_number,
    value_kind,
    ValueKind,
    MISSING,
)

__all__ = [
    "validate_name",
    "is_valid_name",
    "normalize_table_name",
    "InvalidNameError",
    "normalize_type",
    "parse_literal",
    "strict_equals",
    "compare_values",
    "to_number",
    "value_kind",
    "ValueKind",
    "MISSING",
]
