"""Dataset loading and flattening."""

from .flatten import (
    FlatRecord,
    InvalidInputKind,
    array_to_text,
    flatten_record,
    value_to_text,
)
from .dataset import Dataset, NoDataAvailable

__all__ = [
    "Dataset",
    "FlatRecord",
    "InvalidInputKind",
    "NoDataAvailable",
    "array_to_text",
    "flatten_record",
    "value_to_text",
]
