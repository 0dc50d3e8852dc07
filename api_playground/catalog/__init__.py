"""Schema metadata for loaded datasets."""

from .schema import ColumnInfo, ColumnType, SchemaSnapshot, infer_schema, infer_type

__all__ = ["ColumnInfo", "ColumnType", "SchemaSnapshot", "infer_schema", "infer_type"]
