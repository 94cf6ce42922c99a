"""Tests for node kinds, path combination and JSON equality."""

import copy

from livejson import MISSING, NodeKind, kind_of
from livejson._nodes import combine_path, last_segment, same_type, same_value, slot_changed


class TestKind:
    def test_kinds(self):
        assert kind_of({}) is NodeKind.MAPPING
        assert kind_of([]) is NodeKind.SEQUENCE
        for leaf in ("s", 1, 1.5, True, None):
            assert kind_of(leaf) is NodeKind.LEAF

    def test_missing_is_a_falsy_singleton(self):
        assert not MISSING
        assert repr(MISSING) == "<MISSING>"
        assert copy.deepcopy(MISSING) is MISSING


class TestPaths:
    def test_root_children_are_bare(self):
        assert combine_path(None, "a") == "a"
        assert combine_path(None, 0) == "0"

    def test_nested(self):
        assert combine_path("a.b", "c") == "a.b.c"
        assert combine_path("arr", 2) == "arr.2"

    def test_last_segment(self):
        assert last_segment(None) is None
        assert last_segment("a") == "a"
        assert last_segment("a.b.c") == "c"


class TestEquality:
    def test_integer_and_float_differ(self):
        assert not same_value(1, 1.0)
        assert not same_type(1, 1.0)
        assert same_value(1.0, 1.0)
        assert not same_value(1, 2)

    def test_nan_equals_nan(self):
        nan = float("nan")
        assert same_value(nan, float("nan"))
        assert same_value({"x": [nan]}, {"x": [float("nan")]})
        assert not same_value(nan, 1.0)

    def test_bool_is_not_a_number(self):
        assert not same_value(True, 1)
        assert not same_value(0, False)
        assert not same_type(1, True)

    def test_null_is_not_missing(self):
        assert not same_value(None, MISSING)
        assert same_value(None, None)

    def test_arrayness(self):
        assert not same_type([], {})
        assert same_type([1], [2, 3])

    def test_deep(self):
        assert same_value({"a": [1, {"b": None}]}, {"a": [1, {"b": None}]})
        assert not same_value({"a": [1, {"b": None}]}, {"a": [1, {"b": False}]})
        assert not same_value({"a": 1}, {"a": 1, "b": 2})

    def test_slot_changed_uses_identity_for_containers(self):
        a, b = {"x": 1}, {"x": 1}
        assert slot_changed(a, b)
        assert not slot_changed(a, a)
        assert not slot_changed(3, 3)
        assert slot_changed(3, 3.0)
        assert slot_changed(MISSING, 3)
