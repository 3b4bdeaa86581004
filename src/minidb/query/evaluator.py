"""Row-level operations used to evaluate queries.

All functions are pure: they take lists of records and return new lists
without touching the store.
"""

import math
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List, Optional, Sequence

from minidb.errors import QuerySyntaxError
from minidb.query.commands import Condition, SetOperation
from minidb.utils.type_utils import (
    MISSING,
    compare_values,
    matches_like,
    strict_equals,
    to_number,
)

Record = Dict[str, Any]


def evaluate_condition(record: Record, condition: Condition) -> bool:
    """Evaluate one WHERE condition against a record.

    ``=`` and ``!=`` compare the raw stored value without coercion. The
    ordering operators coerce both sides to numbers; anything that is not
    numeric becomes NaN and never matches.
    """
    actual = record.get(condition.field, MISSING)
    expected = condition.value.value
    op = condition.op

    if op == "=":
        return strict_equals(actual, expected)
    if op == "!=":
        return not strict_equals(actual, expected)
    if op == "LIKE":
        return actual is not MISSING and actual is not None and matches_like(actual, expected)

    left, right = to_number(actual), to_number(expected)
    if math.isnan(left) or math.isnan(right):
        return False
    if op == ">":
        return left > right
    if op == "<":
        return left < right
    if op == ">=":
        return left >= right
    if op == "<=":
        return left <= right
    raise ValueError(f"Unknown operator '{op}'")


def filter_records(records: Iterable[Record], condition: Optional[Condition]) -> List[Record]:
    if condition is None:
        return list(records)
    return [record for record in records if evaluate_condition(record, condition)]


def order_records(records: Sequence[Record], field: str, descending: bool = False) -> List[Record]:
    """Stable sort by one field; ties keep their relative order."""
    def compare(a: Record, b: Record) -> int:
        result = compare_values(a.get(field), b.get(field))
        return -result if descending else result

    return sorted(records, key=cmp_to_key(compare))


def limit_records(records: Sequence[Record], limit: Optional[int]) -> List[Record]:
    if limit is None:
        return list(records)
    if limit < 0:
        raise QuerySyntaxError("Invalid LIMIT value")
    return list(records[:limit])


def project_records(records: Iterable[Record], fields: Optional[Sequence[str]]) -> List[Record]:
    """Keep only the requested fields that exist on each record."""
    if fields is None:
        return [dict(record) for record in records]
    return [
        {field: record[field] for field in fields if field in record}
        for record in records
    ]


def join_records(
    left_name: str,
    left_records: Sequence[Record],
    left_field: str,
    right_name: str,
    right_records: Sequence[Record],
    right_field: str,
) -> List[Record]:
    """Nested-loop inner join on strict equality.

    Each matching pair becomes one record whose keys are prefixed with the
    source table name (``table.field``).
    """
    joined = []
    for left in left_records:
        if left_field not in left:
            continue
        for right in right_records:
            if right_field not in right:
                continue
            if not strict_equals(left[left_field], right[right_field]):
                continue
            merged = {f"{left_name}.{key}": value for key, value in left.items()}
            merged.update({f"{right_name}.{key}": value for key, value in right.items()})
            joined.append(merged)
    return joined


def records_equal(a: Record, b: Record) -> bool:
    """Same number of keys and every key strictly equal; key order is irrelevant."""
    if len(a) != len(b):
        return False
    for key, value in a.items():
        if key not in b or not strict_equals(value, b[key]):
            return False
    return True


def _contains(records: Iterable[Record], record: Record) -> bool:
    return any(records_equal(record, other) for other in records)


def _distinct(records: Iterable[Record]) -> List[Record]:
    result: List[Record] = []
    for record in records:
        if not _contains(result, record):
            result.append(record)
    return result


def union(a: Sequence[Record], b: Sequence[Record]) -> List[Record]:
    return _distinct(list(a) + list(b))


def intersect(a: Sequence[Record], b: Sequence[Record]) -> List[Record]:
    return _distinct(record for record in a if _contains(b, record))


def difference(a: Sequence[Record], b: Sequence[Record]) -> List[Record]:
    return _distinct(record for record in a if not _contains(b, record))


SET_FUNCTIONS = {
    SetOperation.UNION: union,
    SetOperation.INTERSECT: intersect,
    SetOperation.DIFFERENCE: difference,
}


def apply_set_operation(op: SetOperation, a: Sequence[Record], b: Sequence[Record]) -> List[Record]:
    return SET_FUNCTIONS[SetOperation(op)](a, b)
