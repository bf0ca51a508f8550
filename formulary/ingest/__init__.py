"""Ingestion boundary: read flat CSV/xlsx tables into validated FlatRows."""

from .reader import (
    EmptyFileError,
    IngestError,
    MissingColumnsError,
    RowIssue,
    TableData,
    UnsupportedFileError,
    normalize_rows,
    read_table,
)

__all__ = [
    "IngestError",
    "EmptyFileError",
    "MissingColumnsError",
    "UnsupportedFileError",
    "RowIssue",
    "TableData",
    "normalize_rows",
    "read_table",
]
