"""Immutable dataset snapshot pairing raw data with its flattened rows."""

import logging
from collections.abc import Mapping
from typing import Any, List, Optional, Tuple

from ..catalog.schema import SchemaSnapshot, infer_schema
from .flatten import FlatRecord, flatten_record

logger = logging.getLogger(__name__)

NOT_ARRAY_MESSAGE = "SQL queries are only available for array data"
EMPTY_ARRAY_MESSAGE = "SQL queries are not available for an empty array"
NOT_OBJECT_MESSAGE = "SQL queries are only available for arrays of objects"


class NoDataAvailable(ValueError):
    """Raised when a dataset cannot be queried."""


class Dataset:
    """Raw fetched data together with its derived query state.

    The flattened rows and the schema snapshot are computed in the
    constructor, before the instance exists, so a published Dataset never
    has raw data and rows out of sync. Replacing data means building a new
    Dataset.
    """

    def __init__(self, raw: Any, source_url: Optional[str] = None):
        """Initialize dataset.

        Args:
            raw: Parsed JSON value as returned by the fetch layer
            source_url: URL the data was fetched from, if any
        """
        rows, unavailable_reason = _derive_rows(raw)
        self._raw = raw
        self._source_url = source_url
        self._rows: Tuple[FlatRecord, ...] = rows
        self._unavailable_reason = unavailable_reason
        self._schema = infer_schema(rows)
        logger.info(
            f"Loaded dataset from {source_url or 'memory'}: "
            f"{len(rows)} rows, {len(self._schema) if self._schema else 0} columns"
        )

    @property
    def raw(self) -> Any:
        """The data exactly as supplied by the caller."""
        return self._raw

    @property
    def source_url(self) -> Optional[str]:
        return self._source_url

    @property
    def rows(self) -> Tuple[FlatRecord, ...]:
        """Flattened rows, in original order."""
        return self._rows

    @property
    def schema(self) -> Optional[SchemaSnapshot]:
        return self._schema

    @property
    def is_queryable(self) -> bool:
        return self._unavailable_reason is None

    @property
    def unavailable_reason(self) -> Optional[str]:
        """Standing message explaining why queries are disabled."""
        return self._unavailable_reason

    def require_queryable(self) -> Tuple[FlatRecord, ...]:
        """Return the flattened rows or raise if querying is unsupported."""
        if self._unavailable_reason is not None:
            raise NoDataAvailable(self._unavailable_reason)
        return self._rows

    def __len__(self) -> int:
        if isinstance(self._raw, list):
            return len(self._raw)
        return 0

    def __repr__(self) -> str:
        return f"Dataset(rows={len(self._rows)}, queryable={self.is_queryable})"


def _derive_rows(raw: Any) -> Tuple[Tuple[FlatRecord, ...], Optional[str]]:
    """Flatten every element of an array of records."""
    if not isinstance(raw, list):
        return (), NOT_ARRAY_MESSAGE
    if not raw:
        return (), EMPTY_ARRAY_MESSAGE
    if not isinstance(raw[0], Mapping):
        return (), NOT_OBJECT_MESSAGE
    rows: List[FlatRecord] = []
    for item in raw:
        if isinstance(item, Mapping):
            rows.append(flatten_record(item))
        else:
            rows.append(flatten_record({"value": item}))
    return tuple(rows), None
