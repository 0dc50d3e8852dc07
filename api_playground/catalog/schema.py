"""Schema inference for flattened datasets."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple


class ColumnType(Enum):
    """Semantic column types inferred from a sample value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class ColumnInfo:
    """Column metadata."""

    name: str
    inferred_type: ColumnType
    nullable: bool

    def __repr__(self) -> str:
        suffix = " NULL" if self.nullable else ""
        return f"ColumnInfo({self.name}, {self.inferred_type.value}{suffix})"


@dataclass(frozen=True)
class SchemaSnapshot:
    """Ordered column list derived from the first record of a dataset.

    Records that carry keys the first record lacks are not reconciled;
    those keys stay queryable by name but never appear here.
    """

    columns: Tuple[ColumnInfo, ...]

    def get_column(self, name: str) -> Optional[ColumnInfo]:
        """Get column by exact name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def column_names(self) -> Tuple[str, ...]:
        names = []
        for col in self.columns:
            names.append(col.name)
        return tuple(names)

    def __len__(self) -> int:
        return len(self.columns)

    def __repr__(self) -> str:
        return f"SchemaSnapshot(cols={len(self.columns)})"


def infer_type(value: Any) -> ColumnType:
    """Map one flattened value to its column type.

    Null samples are reported as strings; ``bool`` is checked before
    numbers because it is an ``int`` subclass.
    """
    if value is None or isinstance(value, str):
        return ColumnType.STRING
    if isinstance(value, bool):
        return ColumnType.BOOLEAN
    if isinstance(value, (int, float)):
        return ColumnType.NUMBER
    if isinstance(value, (list, tuple)):
        return ColumnType.ARRAY
    return ColumnType.OBJECT


def infer_schema(records: Sequence[Dict[str, Any]]) -> Optional[SchemaSnapshot]:
    """Derive the schema snapshot from the first flattened record.

    Args:
        records: Flattened records

    Returns:
        Schema snapshot, or None when there is no record to sample
    """
    if not records:
        return None
    sample = records[0]
    columns = []
    for name, value in sample.items():
        columns.append(
            ColumnInfo(
                name=name,
                inferred_type=infer_type(value),
                nullable=value is None,
            )
        )
    return SchemaSnapshot(columns=tuple(columns))
