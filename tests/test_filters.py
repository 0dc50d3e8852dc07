"""Tests for the column filter panel."""

from api_playground.filters import (
    FilterOperator,
    FilterRule,
    apply_filters,
    available_columns,
    column_label,
    operators_for_type,
)


def _posts():
    return [
        {"userId": 1, "title": "Sunt aut facere", "views": 120, "published": True, "tag": None},
        {"userId": 1, "title": "Qui est esse", "views": 45, "published": False, "tag": "news"},
        {"userId": 2, "title": "Ea dolorum", "views": "unknown", "published": True, "tag": "NEWS"},
    ]


def test_equals_is_case_insensitive():
    """Text equality ignores case."""
    rules = [FilterRule("tag", FilterOperator.EQUALS, "News")]

    assert [post["views"] for post in apply_filters(_posts(), rules)] == [45, "unknown"]


def test_contains_is_substring_match():
    """Contains matches anywhere in the text."""
    rules = [FilterRule("title", FilterOperator.CONTAINS, "EST")]

    assert [post["title"] for post in apply_filters(_posts(), rules)] == ["Qui est esse"]


def test_numeric_comparisons_skip_non_numbers():
    """Ordering operators only apply to numeric values."""
    greater = apply_filters(_posts(), [FilterRule("views", FilterOperator.GREATER, "50")])
    less_equal = apply_filters(_posts(), [FilterRule("views", FilterOperator.LESS_EQUAL, "45")])
    bad_target = apply_filters(_posts(), [FilterRule("views", FilterOperator.LESS, "lots")])

    assert [post["views"] for post in greater] == [120]
    assert [post["views"] for post in less_equal] == [45]
    assert bad_target == []


def test_null_matches_only_empty_equals():
    """Null values pass an equals-empty rule and nothing else."""
    empty = apply_filters(_posts(), [FilterRule("tag", FilterOperator.EQUALS, "")])
    contains = apply_filters(_posts(), [FilterRule("tag", FilterOperator.CONTAINS, "")])

    assert [post["views"] for post in empty] == [120]
    assert len(contains) == 2


def test_boolean_equals_is_textual():
    """Booleans compare against their JSON spelling."""
    rules = [FilterRule("published", FilterOperator.EQUALS, "true")]

    assert len(apply_filters(_posts(), rules)) == 2
    assert apply_filters(_posts(), [FilterRule("published", FilterOperator.EQUALS, "True")]) == []


def test_rules_are_combined_with_and():
    """Every rule must hold."""
    rules = [
        FilterRule("userId", FilterOperator.EQUALS, "1"),
        FilterRule("published", FilterOperator.EQUALS, "true"),
    ]

    assert [post["views"] for post in apply_filters(_posts(), rules)] == [120]


def test_no_rules_returns_copy():
    """Without rules the data comes back unchanged in a new list."""
    data = _posts()
    filtered = apply_filters(data, [])

    assert filtered == data
    assert filtered is not data


def test_available_columns():
    """Columns come from the first record with labels and types."""
    columns = available_columns(_posts())

    assert [column.key for column in columns] == ["userId", "title", "views", "published", "tag"]
    assert columns[0].label == "User Id"
    assert columns[0].value_type == "number"
    assert columns[3].value_type == "boolean"
    assert columns[4].value_type == "null"
    assert available_columns([]) == []


def test_operators_for_type():
    """Each value type offers its own operators."""
    assert operators_for_type("string") == [FilterOperator.EQUALS, FilterOperator.CONTAINS]
    assert len(operators_for_type("number")) == 5
    assert operators_for_type("boolean") == [FilterOperator.EQUALS]


def test_column_label():
    """camelCase keys become title words."""
    assert column_label("userId") == "User Id"
    assert column_label("name") == "Name"
    assert column_label("") == ""
