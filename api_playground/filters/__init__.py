"""Simple column filters (the non-SQL filtering path)."""

from .panel import (
    FilterColumn,
    FilterOperator,
    FilterRule,
    apply_filters,
    available_columns,
    column_label,
    operators_for_type,
)

__all__ = [
    "FilterColumn",
    "FilterOperator",
    "FilterRule",
    "apply_filters",
    "available_columns",
    "column_label",
    "operators_for_type",
]
