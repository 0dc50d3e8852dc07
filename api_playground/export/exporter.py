"""Export of displayed data to CSV, JSON and Excel."""

import io
import json
import logging
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pyarrow as pa
import pyarrow.csv as pa_csv
from openpyxl import Workbook

from ..config.config import ExportConfig
from ..dataset.flatten import value_to_text

logger = logging.getLogger(__name__)

XLSX_SHEET_NAME = "Data"


class ExportError(ValueError):
    """Raised for unsupported export requests."""


class ExportFormat(Enum):
    """Supported export formats."""

    CSV = "csv"
    JSON = "json"
    XLSX = "xlsx"

    @classmethod
    def parse(cls, name: str) -> "ExportFormat":
        for fmt in cls:
            if fmt.value == name.lower():
                return fmt
        raise ExportError(f"Unsupported export format: {name}")


def flatten_for_export(value: Any, prefix: str = "") -> Dict[str, Any]:
    """Flatten one record with dotted keys for spreadsheet-style output.

    Mappings are walked by key and a top-level list by index (``0``,
    ``1``, ...). Arrays nested inside a record are kept as compact JSON
    text (empty arrays become an empty string) so they survive a round
    trip through a CSV cell.
    """
    flattened: Dict[str, Any] = {}
    for key, item in _members(value):
        new_key = f"{prefix}.{key}" if prefix else key
        if isinstance(item, Mapping):
            flattened.update(flatten_for_export(item, new_key))
        elif isinstance(item, list):
            flattened[new_key] = value_to_text(item) if item else ""
        else:
            flattened[new_key] = item
    return flattened


def _members(value: Any) -> List[Tuple[str, Any]]:
    if isinstance(value, Mapping):
        return [(str(key), item) for key, item in value.items()]
    if isinstance(value, list):
        return [(str(index), item) for index, item in enumerate(value)]
    return []


def prepare_rows(data: Any) -> List[Dict[str, Any]]:
    """Turn any JSON value into a list of flat rows."""
    if isinstance(data, list):
        rows = []
        for item in data:
            if isinstance(item, (Mapping, list)):
                rows.append(flatten_for_export(item))
            else:
                rows.append({"value": item})
        return rows
    if isinstance(data, Mapping):
        return [flatten_for_export(data)]
    return [{"value": data}]


def rows_to_table(rows: Sequence[Mapping[str, Any]]) -> pa.Table:
    """Build an Arrow table from rows with possibly differing keys.

    Columns appear in first-seen order and missing cells are null. A
    column whose values Arrow cannot type consistently is stored as text.
    """
    names = _column_names(rows)
    arrays = []
    for name in names:
        values = []
        for row in rows:
            values.append(row.get(name))
        arrays.append(_to_array(values))
    return pa.Table.from_arrays(arrays, names=names)


def _column_names(rows: Sequence[Mapping[str, Any]]) -> List[str]:
    names: List[str] = []
    seen = set()
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                names.append(key)
    return names


def _to_array(values: List[Any]) -> pa.Array:
    """Arrow array for one column; nested values become JSON text."""
    try:
        array = pa.array(values)
    except (pa.ArrowInvalid, pa.ArrowTypeError):
        return _text_array(values)
    if pa.types.is_null(array.type):
        return pa.array(values, type=pa.string())
    # CSV and spreadsheet cells hold scalars only
    if pa.types.is_nested(array.type):
        return _text_array(values)
    return array


def _text_array(values: List[Any]) -> pa.Array:
    texts = []
    for value in values:
        texts.append(None if value is None else value_to_text(value))
    return pa.array(texts, type=pa.string())


def to_csv_bytes(data: Any) -> bytes:
    """Serialize data as CSV."""
    table = rows_to_table(prepare_rows(data))
    sink = pa.BufferOutputStream()
    pa_csv.write_csv(table, sink)
    return sink.getvalue().to_pybytes()


def to_xlsx_bytes(data: Any) -> bytes:
    """Serialize data as a single-sheet Excel workbook.

    Cells go through the same Arrow table as CSV, so both formats agree
    on column order and on which values are written as text.
    """
    table = rows_to_table(prepare_rows(data))
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = XLSX_SHEET_NAME
    sheet.append(table.column_names)
    for record in table.to_pylist():
        sheet.append(list(record.values()))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def to_json_bytes(data: Any, indent: int = 2) -> bytes:
    """Serialize data as pretty-printed JSON."""
    return json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")


def export_filename(fmt: ExportFormat, prefix: str, today: Optional[date] = None) -> str:
    """File name with today's date, e.g. ``api-data-2024-05-01.csv``."""
    day = today or date.today()
    return f"{prefix}-{day.isoformat()}.{fmt.value}"


def export_data(
    data: Any,
    fmt: ExportFormat,
    config: Optional[ExportConfig] = None,
    today: Optional[date] = None,
) -> Tuple[str, bytes]:
    """Serialize the displayed data.

    Args:
        data: Data currently on screen (query result or dataset)
        fmt: Output format
        config: Export configuration
        today: Date to embed in the file name

    Returns:
        Tuple of (filename, payload)
    """
    config = config or ExportConfig()
    if fmt == ExportFormat.CSV:
        payload = to_csv_bytes(data)
    elif fmt == ExportFormat.JSON:
        payload = to_json_bytes(data, indent=config.json_indent)
    elif fmt == ExportFormat.XLSX:
        payload = to_xlsx_bytes(data)
    else:
        raise ExportError(f"Unsupported export format: {fmt}")
    filename = export_filename(fmt, config.filename_prefix, today)
    logger.info(f"Exported {filename} ({len(payload)} bytes)")
    return filename, payload
