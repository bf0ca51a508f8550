from __future__ import annotations

from dataclasses import dataclass

"""FlatRow model: one denormalized formula/material row.

A FlatRow pairs the identity and metadata of a formula with exactly one of
its material lines. Rows are produced by the ingestion boundary
(formulary.ingest.reader) or by flattening aggregates back out for export.
"""

__all__ = [
    "FlatRow",
    "COLUMNS",
]

# Column vocabulary of the flat table, in export order.
COLUMNS = (
    "formula_id",
    "formula_name",
    "category",
    "notes",
    "material_id",
    "material_name",
    "qty",
    "uom",
    "unit_cost",
)


@dataclass(frozen=True)
class FlatRow:
    """Single input row (formula metadata + one material line).

    Optional fields use None for "not provided". unit_cost=None means the
    cost of the line is unknown and is never the same as 0.0.
    qty_defaulted records that the source quantity could not be parsed and
    was replaced by 0; it is informational only and plays no part in grouping.
    """
    formula_id: str
    formula_name: str
    material_id: str
    material_name: str
    qty: float
    category: str | None = None
    notes: str | None = None
    uom: str | None = None
    unit_cost: float | None = None
    qty_defaulted: bool = False

    def to_record(self) -> dict[str, object]:
        """Return the row as a column -> value dict in COLUMNS order."""
        return {col: getattr(self, col) for col in COLUMNS}
