from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.flat_row import FlatRow

"""Flat table reader.

First line is the header, every following non-blank line is one
formula/material row. All cells are read as strings and converted here, so
the grouping engine only ever sees FlatRow instances:

- required text fields missing -> row rejected (reported, not raised)
- qty unparsable or empty -> 0 with qty_defaulted=True
- unit_cost empty -> None ("unknown"); unparsable -> None plus a warning
"""

__all__ = [
    "IngestError",
    "UnsupportedFileError",
    "EmptyFileError",
    "MissingColumnsError",
    "RowIssue",
    "TableData",
    "REQUIRED_COLUMNS",
    "OPTIONAL_COLUMNS",
    "read_table",
    "normalize_rows",
]

REQUIRED_TEXT_FIELDS = ("formula_id", "formula_name", "material_id", "material_name")
REQUIRED_COLUMNS = (*REQUIRED_TEXT_FIELDS, "qty")
OPTIONAL_COLUMNS = ("category", "notes", "uom", "unit_cost")

CSV_SUFFIXES = {".csv"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_ENCODINGS = ("utf-8-sig", "cp1252", "latin1")
NA_VALUES = [""]

# Header occupies line 1; data row i (0-based) is reported as line i + 2
HEADER_LINES = 1


class IngestError(Exception):
    """Base class for file-level ingestion failures."""


class UnsupportedFileError(IngestError):
    """Raised when the file suffix is neither CSV nor Excel."""


class EmptyFileError(IngestError):
    """Raised when the file has no header row."""


class MissingColumnsError(IngestError):
    """Raised when required columns are missing from the header."""


@dataclass(frozen=True)
class RowIssue:
    row: int  # line number in the source file
    error_type: str  # UPPER_SNAKE
    message: str


@dataclass
class TableData:
    source: str
    columns: list[str]
    rows: list[FlatRow] = field(default_factory=list)
    rejected: list[RowIssue] = field(default_factory=list)  # rows dropped
    warnings: list[RowIssue] = field(default_factory=list)  # rows kept with a fix-up

    @property
    def total_rows(self) -> int:
        return len(self.rows) + len(self.rejected)


def read_table(path: Path) -> pd.DataFrame:
    """Read a CSV or Excel file into a DataFrame of strings.

    Parameters
    ----------
    path: input file (.csv, .xlsx, .xlsm)

    Only empty cells are read as missing. Text such as "NA" or "None" stays
    literal; mapping tokens to None is left to null_sentinels.
    """
    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(
            path, dtype=str, keep_default_na=False, na_values=NA_VALUES
        )
    if suffix not in CSV_SUFFIXES:
        raise UnsupportedFileError(f"unsupported file type '{suffix}': {path.name}")

    last_error: UnicodeDecodeError | None = None
    for enc in CSV_ENCODINGS:
        try:
            return pd.read_csv(
                path,
                dtype=str,
                encoding=enc,
                skip_blank_lines=False,
                keep_default_na=False,
                na_values=NA_VALUES,
            )
        except UnicodeDecodeError as e:
            last_error = e
            continue
        except pd.errors.EmptyDataError as e:
            raise EmptyFileError(f"file has no header: {path.name}") from e
    raise IngestError(f"could not decode {path.name}") from last_error


def _clean_text(value: Any, null_sentinels: set[str] | None) -> str | None:
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    if text == "":
        return None
    if null_sentinels and text.upper() in null_sentinels:
        return None
    return text


def _parse_number(text: str | None) -> float | None:
    """float(text) for finite numbers, otherwise None."""
    if text is None:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def normalize_rows(
    df: pd.DataFrame,
    source: str,
    null_sentinels: set[str] | None = None,
) -> TableData:
    """Convert a raw string DataFrame into FlatRows.

    Steps:
    1. Validate a header exists and contains REQUIRED_COLUMNS
    2. Skip rows where every cell is blank
    3. Reject rows missing a required text field
    4. Coerce qty (default 0) and unit_cost (default None)
    """
    columns = [str(c).strip() for c in df.columns]
    if not columns:
        raise EmptyFileError(f"file has no header: {source}")
    missing = set(REQUIRED_COLUMNS) - set(columns)
    if missing:
        raise MissingColumnsError(f"'{source}' missing columns: {sorted(missing)}")

    data = TableData(source=source, columns=columns)
    for index, raw in enumerate(df.itertuples(index=False, name=None)):
        values = {
            col: _clean_text(val, null_sentinels)
            for col, val in zip(columns, raw, strict=False)
        }
        if all(v is None for v in values.values()):
            continue
        line = index + HEADER_LINES + 1

        absent = [f for f in REQUIRED_TEXT_FIELDS if values.get(f) is None]
        if absent:
            data.rejected.append(
                RowIssue(line, "MISSING_REQUIRED_FIELD", f"missing {', '.join(absent)}")
            )
            continue

        qty = _parse_number(values.get("qty"))
        unit_cost_text = values.get("unit_cost")
        unit_cost = _parse_number(unit_cost_text)
        if unit_cost_text is not None and unit_cost is None:
            data.warnings.append(
                RowIssue(line, "INVALID_UNIT_COST", f"unit_cost '{unit_cost_text}' is not a number")
            )

        data.rows.append(
            FlatRow(
                formula_id=values["formula_id"],
                formula_name=values["formula_name"],
                material_id=values["material_id"],
                material_name=values["material_name"],
                qty=qty if qty is not None else 0,
                category=values.get("category"),
                notes=values.get("notes"),
                uom=values.get("uom"),
                unit_cost=unit_cost,
                qty_defaulted=qty is None,
            )
        )
    return data
