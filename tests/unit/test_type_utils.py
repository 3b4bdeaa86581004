"""Tests for value typing helpers."""

import math

import pytest

from minidb.errors import TypeMismatchError
from minidb.utils.type_utils import (
    MISSING,
    ValueKind,
    coerce_for_column,
    compare_values,
    is_valid_for_type,
    matches_like,
    normalize_type,
    parse_literal,
    strict_equals,
    to_number,
    validate_value,
    value_kind,
)


class TestNormalizeType:
    """Test type name normalization."""

    @pytest.mark.parametrize(
        "alias, expected",
        [
            ("string", "string"),
            ("TEXT", "string"),
            ("int", "number"),
            ("Float", "number"),
            ("bool", "boolean"),
            ("datetime", "date"),
            ("UUID", "uuid"),
        ],
    )
    def test_aliases(self, alias, expected):
        assert normalize_type(alias) == expected

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Invalid type: 'blob'"):
            normalize_type("blob")

    def test_empty_type(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            normalize_type("")


class TestValueKind:
    """Test value classification."""

    def test_bool_is_not_number(self):
        assert value_kind(True) == ValueKind.BOOLEAN
        assert value_kind(1) == ValueKind.NUMBER

    def test_other_kinds(self):
        assert value_kind(None) == ValueKind.NULL
        assert value_kind(MISSING) == ValueKind.MISSING
        assert value_kind("x") == ValueKind.STRING
        assert value_kind([1, 2]) == ValueKind.JSON
        assert value_kind({"a": 1}) == ValueKind.JSON


class TestParseLiteral:
    """Test conversion of query literals."""

    def test_numbers(self):
        assert parse_literal("42") == 42
        assert isinstance(parse_literal("42"), int)
        assert parse_literal("-3.5") == -3.5
        assert parse_literal("1e3") == 1000.0

    def test_booleans_and_null(self):
        assert parse_literal("TRUE") is True
        assert parse_literal("false") is False
        assert parse_literal("Null") is None

    def test_strings(self):
        assert parse_literal("Ada") == "Ada"
        assert parse_literal("'quoted'") == "quoted"
        assert parse_literal('"12"') == "12"


class TestComparisons:
    """Test strict equality, numeric coercion and ordering."""

    def test_strict_equals_never_coerces(self):
        assert strict_equals(1, 1.0)
        assert not strict_equals(True, 1)
        assert not strict_equals("1", 1)
        assert not strict_equals(None, MISSING)
        assert strict_equals(None, None)

    def test_to_number(self):
        assert to_number(None) == 0.0
        assert to_number(True) == 1.0
        assert to_number(" 12 ") == 12.0
        assert to_number("") == 0.0
        assert to_number("0x10") == 16.0
        assert math.isnan(to_number("abc"))
        assert math.isnan(to_number(MISSING))
        assert math.isnan(to_number([1]))

    def test_compare_values(self):
        assert compare_values("apple", "banana") == -1
        assert compare_values(10, 9) == 1
        # Strings compare lexically, mixed pairs numerically
        assert compare_values("10", "9") == -1
        assert compare_values("10", 9) == 1
        # Incomparable pairs are equal
        assert compare_values("abc", 3) == 0


class TestLike:
    """Test LIKE pattern matching."""

    def test_wildcards(self):
        assert matches_like("Alice", "a%")
        assert matches_like("Bob", "_o_")
        assert not matches_like("Bobby", "_o_")

    def test_special_characters_are_literal(self):
        assert matches_like("a.b", "a.b")
        assert not matches_like("axb", "a.b")

    def test_numbers_match_their_text(self):
        assert matches_like(30, "3%")


class TestValidateValue:
    """Test type checks against declared column types."""

    def test_null_is_valid_for_every_type(self):
        for column_type in ("string", "number", "boolean", "date", "uuid"):
            assert is_valid_for_type(column_type, None)

    def test_type_checks(self):
        assert is_valid_for_type("string", "x")
        assert not is_valid_for_type("string", 1)
        assert is_valid_for_type("number", 1.5)
        assert not is_valid_for_type("number", True)
        assert not is_valid_for_type("number", float("nan"))
        assert is_valid_for_type("boolean", False)
        assert not is_valid_for_type("boolean", 0)
        assert is_valid_for_type("date", "2024-01-31")
        assert is_valid_for_type("date", "2024-01-31T10:00:00.000Z")
        assert not is_valid_for_type("date", "yesterday")
        assert is_valid_for_type("uuid", "3f1c2a9e-8d4b-4c3e-9f7a-1b2c3d4e5f60")
        assert not is_valid_for_type("uuid", "not-a-uuid")

    def test_validate_value_raises(self):
        with pytest.raises(TypeMismatchError, match="users.age"):
            validate_value("users", "age", "number", "thirty")


class TestCoerceForColumn:
    """Test SET literal coercion."""

    def test_string_column_keeps_literal_text(self):
        assert coerce_for_column("string", 12, "12") == "12"
        assert coerce_for_column("string", True, "true") == "true"

    def test_other_columns_keep_parsed_value(self):
        assert coerce_for_column("number", 12, "12") == 12
        assert coerce_for_column("boolean", True, "true") is True

    def test_null_stays_null(self):
        assert coerce_for_column("string", None, "null") is None
