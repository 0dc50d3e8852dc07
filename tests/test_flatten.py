"""Tests for record flattening."""

import pytest

from api_playground.dataset import InvalidInputKind, array_to_text, flatten_record, value_to_text


def test_flatten_nested_object_and_array():
    """Nested objects inline under underscore keys, arrays join to text."""
    record = {"address": {"city": "X"}, "tags": ["a", "b"]}

    assert flatten_record(record) == {"address_city": "X", "tags": "a, b"}


def test_flatten_deep_nesting():
    """Every level of nesting contributes a key segment."""
    record = {"a": {"b": {"c": 1}}, "top": True}

    assert flatten_record(record) == {"a_b_c": 1, "top": True}


def test_flatten_keeps_scalars_and_null():
    """Scalars and null pass through untouched."""
    record = {"id": 7, "score": 2.5, "active": False, "note": None, "name": "Ann"}

    assert flatten_record(record) == record


def test_flatten_empty_nested_object_disappears():
    """An empty nested object contributes no keys."""
    assert flatten_record({"id": 1, "meta": {}}) == {"id": 1}


def test_flatten_array_of_objects_uses_compact_json():
    """Array elements that are containers are serialized as JSON."""
    record = {"items": [{"x": 1}, {"x": 2}]}

    assert flatten_record(record) == {"items": '{"x":1}, {"x":2}'}


def test_flatten_does_not_mutate_input():
    """The caller's record is left unchanged."""
    record = {"address": {"city": "X"}}
    flatten_record(record)

    assert record == {"address": {"city": "X"}}


def test_flatten_rejects_non_mapping():
    """Flattening a scalar is a programming error."""
    with pytest.raises(InvalidInputKind):
        flatten_record(["not", "a", "record"])

    assert issubclass(InvalidInputKind, TypeError)


def test_value_to_text():
    """Values render with their JSON spelling."""
    assert value_to_text("plain") == "plain"
    assert value_to_text(None) == "null"
    assert value_to_text(True) == "true"
    assert value_to_text(3.0) == "3"
    assert value_to_text(2.5) == "2.5"
    assert value_to_text([1, 2]) == "[1,2]"


def test_array_to_text_mixed_values():
    """Array joining renders each element as text."""
    assert array_to_text([1, "two", None, False]) == "1, two, null, false"
    assert array_to_text([]) == ""
