"""Column filters applied directly to raw records."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Sequence

from ..dataset.flatten import value_to_text


class FilterOperator(Enum):
    """Filter operators offered by the panel."""

    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER = "greater"
    LESS = "less"
    GREATER_EQUAL = "greater_equal"
    LESS_EQUAL = "less_equal"


@dataclass(frozen=True)
class FilterRule:
    column: str
    operator: FilterOperator
    value: str


@dataclass(frozen=True)
class FilterColumn:
    """A column offered for filtering."""

    key: str
    label: str
    value_type: str


_OPERATORS_BY_TYPE = {
    "string": [FilterOperator.EQUALS, FilterOperator.CONTAINS],
    "number": [
        FilterOperator.EQUALS,
        FilterOperator.GREATER,
        FilterOperator.LESS,
        FilterOperator.GREATER_EQUAL,
        FilterOperator.LESS_EQUAL,
    ],
}


def value_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def column_label(key: str) -> str:
    """``userId`` -> ``User Id``."""
    if not key:
        return key
    spaced = re.sub(r"([A-Z])", r" \1", key[1:])
    return key[0].upper() + spaced


def available_columns(data: Sequence[Any]) -> List[FilterColumn]:
    """Columns of the first record, in key order."""
    if not data or not isinstance(data[0], Mapping):
        return []
    columns = []
    for key, value in data[0].items():
        columns.append(FilterColumn(key=key, label=column_label(key), value_type=value_type(value)))
    return columns


def operators_for_type(type_name: str) -> List[FilterOperator]:
    return list(_OPERATORS_BY_TYPE.get(type_name, [FilterOperator.EQUALS]))


def apply_filters(data: Sequence[Any], rules: Sequence[FilterRule]) -> List[Any]:
    """Keep records that satisfy every rule."""
    if not rules:
        return list(data)
    kept = []
    for item in data:
        if all(_matches(item, rule) for rule in rules):
            kept.append(item)
    return kept


def _matches(item: Any, rule: FilterRule) -> bool:
    value = item.get(rule.column) if isinstance(item, Mapping) else None
    if value is None:
        return rule.operator == FilterOperator.EQUALS and rule.value == ""

    if rule.operator == FilterOperator.EQUALS:
        if isinstance(value, bool):
            return value_to_text(value) == rule.value
        return value_to_text(value).lower() == rule.value.lower()
    if rule.operator == FilterOperator.CONTAINS:
        return rule.value.lower() in value_to_text(value).lower()
    return _compare_numeric(value, rule)


def _compare_numeric(value: Any, rule: FilterRule) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        target = float(rule.value)
    except ValueError:
        return False
    if rule.operator == FilterOperator.GREATER:
        return value > target
    if rule.operator == FilterOperator.LESS:
        return value < target
    if rule.operator == FilterOperator.GREATER_EQUAL:
        return value >= target
    if rule.operator == FilterOperator.LESS_EQUAL:
        return value <= target
    return True
