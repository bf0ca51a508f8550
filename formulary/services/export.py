from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from ..core.grouping import flatten_formulas
from ..models.flat_row import COLUMNS
from ..models.formula import FormulaAggregate

"""CSV export of grouped formulas.

Aggregates are flattened back into one row per material line with the
formula metadata repeated on every row, using the same column vocabulary
the reader accepts.
"""

__all__ = [
    "EXPORT_COLUMNS",
    "formulas_to_frame",
    "export_formulas",
    "export_filename",
]

EXPORT_COLUMNS = list(COLUMNS)


def formulas_to_frame(formulas: Iterable[FormulaAggregate]) -> pd.DataFrame:
    records = [row.to_record() for row in flatten_formulas(formulas)]
    return pd.DataFrame.from_records(records, columns=EXPORT_COLUMNS)


def export_formulas(formulas: Iterable[FormulaAggregate], path: Path) -> Path:
    """Write formulas as a flat CSV file (None -> empty cell)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    formulas_to_frame(formulas).to_csv(path, index=False, na_rep="")
    return path


def export_filename(formula: FormulaAggregate) -> str:
    """Download name for one formula's materials, e.g. Sunrise_Burst_materials.csv."""
    stem = re.sub(r"\s+", "_", formula.name)
    return f"{stem}_materials.csv"
