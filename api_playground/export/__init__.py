"""Export of displayed data."""

from .exporter import (
    ExportError,
    ExportFormat,
    export_data,
    export_filename,
    flatten_for_export,
    prepare_rows,
    rows_to_table,
    to_csv_bytes,
    to_json_bytes,
    to_xlsx_bytes,
    XLSX_SHEET_NAME,
)

__all__ = [
    "ExportError",
    "ExportFormat",
    "export_data",
    "export_filename",
    "flatten_for_export",
    "prepare_rows",
    "rows_to_table",
    "to_csv_bytes",
    "to_json_bytes",
    "to_xlsx_bytes",
    "XLSX_SHEET_NAME",
]
