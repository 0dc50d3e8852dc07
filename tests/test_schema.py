"""Tests for schema inference."""

from api_playground.catalog import ColumnType, infer_schema, infer_type
from api_playground.dataset import flatten_record


def test_infer_schema_from_first_record():
    """Columns come from the first record in key order."""
    rows = [
        flatten_record(
            {"id": 1, "name": "Ann", "active": True, "address": {"city": "X"}, "tags": ["a"]}
        )
    ]

    schema = infer_schema(rows)

    assert schema.column_names() == ("id", "name", "active", "address_city", "tags")
    assert schema.get_column("id").inferred_type == ColumnType.NUMBER
    assert schema.get_column("name").inferred_type == ColumnType.STRING
    assert schema.get_column("active").inferred_type == ColumnType.BOOLEAN
    assert schema.get_column("tags").inferred_type == ColumnType.STRING
    assert len(schema) == 5


def test_null_sample_is_nullable_string():
    """A null sample value yields a nullable string column."""
    schema = infer_schema([{"id": 1, "email": None}])

    email = schema.get_column("email")
    assert email.inferred_type == ColumnType.STRING
    assert email.nullable is True
    assert schema.get_column("id").nullable is False


def test_infer_schema_empty_returns_none():
    """No records means no schema."""
    assert infer_schema([]) is None


def test_heterogeneous_records_use_first_only():
    """Keys absent from the first record are not listed."""
    schema = infer_schema([{"a": 1}, {"a": 2, "b": 3}])

    assert schema.column_names() == ("a",)
    assert schema.get_column("b") is None


def test_infer_type_checks_bool_before_number():
    """Booleans are not reported as numbers."""
    assert infer_type(False) == ColumnType.BOOLEAN
    assert infer_type(0) == ColumnType.NUMBER
    assert infer_type(1.5) == ColumnType.NUMBER
    assert infer_type([1]) == ColumnType.ARRAY
    assert infer_type({"x": 1}) == ColumnType.OBJECT
