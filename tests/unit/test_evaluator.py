"""Tests for the pure query evaluation functions."""

import pytest

from minidb.errors import QuerySyntaxError
from minidb.query.commands import Condition, Literal, SetOperation
from minidb.query.evaluator import (
    apply_set_operation,
    difference,
    evaluate_condition,
    filter_records,
    intersect,
    join_records,
    limit_records,
    order_records,
    project_records,
    records_equal,
    union,
)
from minidb.utils.type_utils import parse_literal


def cond(field, op, text):
    return Condition(field=field, op=op, value=Literal(value=parse_literal(text), text=text))


class TestConditions:
    """Test WHERE condition evaluation."""

    def test_equality_is_strict(self):
        assert evaluate_condition({"n": 1}, cond("n", "=", "1"))
        assert not evaluate_condition({"n": "1"}, cond("n", "=", "1"))
        assert not evaluate_condition({"flag": True}, cond("flag", "=", "1"))
        assert evaluate_condition({"flag": True}, cond("flag", "=", "true"))

    def test_not_equal(self):
        assert evaluate_condition({"n": 2}, cond("n", "!=", "1"))
        assert evaluate_condition({}, cond("n", "!=", "1"))
        assert not evaluate_condition({"n": 1}, cond("n", "!=", "1"))

    def test_null_and_missing(self):
        assert evaluate_condition({"n": None}, cond("n", "=", "null"))
        assert not evaluate_condition({}, cond("n", "=", "null"))

    def test_ordering_coerces_to_numbers(self):
        assert evaluate_condition({"age": "40"}, cond("age", ">", "30"))
        assert evaluate_condition({"age": 30}, cond("age", ">=", "30"))
        assert evaluate_condition({"age": 29.5}, cond("age", "<", "30"))
        assert evaluate_condition({"age": 30}, cond("age", "<=", "30"))

    def test_ordering_with_non_numeric_is_false(self):
        assert not evaluate_condition({"name": "Ada"}, cond("name", ">", "1"))
        assert not evaluate_condition({"name": "Ada"}, cond("name", "<", "1"))
        assert not evaluate_condition({}, cond("age", ">", "1"))

    def test_like(self):
        assert evaluate_condition({"name": "Alice"}, cond("name", "LIKE", "al%"))
        assert not evaluate_condition({"name": None}, cond("name", "LIKE", "%"))
        assert not evaluate_condition({}, cond("name", "LIKE", "%"))


class TestPipeline:
    """Test filter, order, limit and projection."""

    def test_filter_without_condition(self):
        records = [{"a": 1}, {"a": 2}]
        assert filter_records(records, None) == records

    def test_order_desc_then_limit(self):
        records = [{"age": 20}, {"age": 30}, {"age": 25}]
        ordered = order_records(records, "age", descending=True)
        assert limit_records(ordered, 2) == [{"age": 30}, {"age": 25}]

    def test_order_is_stable(self):
        records = [{"k": 1, "n": "a"}, {"k": 0, "n": "b"}, {"k": 1, "n": "c"}]
        assert [r["n"] for r in order_records(records, "k")] == ["b", "a", "c"]
        assert [r["n"] for r in order_records(records, "k", descending=True)] == ["a", "c", "b"]

    def test_order_strings_lexically(self):
        records = [{"n": "b"}, {"n": "C"}, {"n": "a"}]
        assert [r["n"] for r in order_records(records, "n")] == ["C", "a", "b"]

    def test_limit(self):
        records = [{"a": 1}, {"a": 2}]
        assert limit_records(records, 0) == []
        assert limit_records(records, 5) == records
        assert limit_records(records, None) == records
        with pytest.raises(QuerySyntaxError, match="Invalid LIMIT value"):
            limit_records(records, -1)

    def test_project(self):
        records = [{"id": "1", "name": "Ada", "age": 36}, {"id": "2"}]
        assert project_records(records, ("name", "email")) == [{"name": "Ada"}, {}]
        assert project_records(records, None) == records


class TestJoin:
    """Test nested-loop join."""

    def test_join_example(self):
        joined = join_records("a", [{"x": 1}], "x", "b", [{"y": 1}, {"y": 2}], "y")
        assert joined == [{"a.x": 1, "b.y": 1}]

    def test_join_is_strict(self):
        assert join_records("a", [{"x": 1}], "x", "b", [{"y": "1"}, {"y": True}], "y") == []

    def test_join_skips_missing_fields(self):
        assert join_records("a", [{}], "x", "b", [{"y": None}], "y") == []


class TestSetOperations:
    """Test UNION, INTERSECT and DIFFERENCE."""

    A = [{"id": "1", "n": 1}, {"id": "2", "n": 2}, {"id": "2", "n": 2}]
    B = [{"n": 2, "id": "2"}, {"id": "3", "n": 3}]

    def test_records_equal(self):
        assert records_equal({"a": 1, "b": 2}, {"b": 2, "a": 1})
        assert not records_equal({"a": 1}, {"a": 1, "b": None})
        assert not records_equal({"a": 1}, {"a": True})

    def test_union_has_no_duplicates_and_keeps_everything(self):
        result = union(self.A, self.B)
        assert len(result) == 3
        for record in self.A + self.B:
            assert any(records_equal(record, other) for other in result)

    def test_intersect_and_difference_partition_a(self):
        inter = intersect(self.A, self.B)
        diff = difference(self.A, self.B)
        assert inter == [{"id": "2", "n": 2}]
        assert diff == [{"id": "1", "n": 1}]
        for record in self.A:
            in_inter = any(records_equal(record, r) for r in inter)
            in_diff = any(records_equal(record, r) for r in diff)
            assert in_inter != in_diff

    def test_apply_set_operation(self):
        assert apply_set_operation(SetOperation.UNION, [], self.B) == self.B
        assert apply_set_operation("difference", self.B, []) == self.B
