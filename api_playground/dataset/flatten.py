"""Flattening of nested JSON records into query-comparable rows."""

import json
from typing import Any, Dict, Mapping

FlatRecord = Dict[str, Any]

ARRAY_SEPARATOR = ", "
PATH_SEPARATOR = "_"


class InvalidInputKind(TypeError):
    """Raised when a non-mapping value is handed to the flattener."""


def value_to_text(value: Any) -> str:
    """Render a JSON value the way it is displayed and compared as text.

    Strings are returned unchanged, booleans and null use their JSON
    spelling, integral floats drop the trailing ``.0`` and containers are
    serialized as compact JSON.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, int):
        return str(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def array_to_text(values: list) -> str:
    """Join array elements into a single comma-separated string."""
    parts = []
    for item in values:
        parts.append(value_to_text(item))
    return ARRAY_SEPARATOR.join(parts)


def flatten_record(record: Mapping[str, Any], prefix: str = "") -> FlatRecord:
    """Flatten one record.

    Nested mappings are inlined under underscore-joined keys
    (``address.city`` becomes ``address_city``) and arrays become their
    joined textual form. Scalars and null pass through. Later keys win
    when two paths collide.

    Args:
        record: Mapping to flatten
        prefix: Key prefix used while recursing

    Returns:
        New flat mapping

    Raises:
        InvalidInputKind: If ``record`` is not a mapping
    """
    if not isinstance(record, Mapping):
        raise InvalidInputKind(
            f"Cannot flatten a value of type {type(record).__name__}; expected an object"
        )

    flattened: FlatRecord = {}
    for key, value in record.items():
        new_key = f"{prefix}{PATH_SEPARATOR}{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flattened.update(flatten_record(value, new_key))
        elif isinstance(value, list):
            flattened[new_key] = array_to_text(value)
        else:
            flattened[new_key] = value
    return flattened
