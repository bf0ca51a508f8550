from __future__ import annotations

from dataclasses import dataclass

"""MaterialLine and FormulaAggregate models.

A FormulaAggregate is the grouped representation of every FlatRow sharing a
formula_id: metadata from the first row, one MaterialLine per row and a
derived total cost.
"""

__all__ = [
    "MaterialLine",
    "FormulaAggregate",
]


@dataclass(frozen=True)
class MaterialLine:
    """One ingredient entry within a formula."""
    material_id: str
    material_name: str
    qty: float
    uom: str | None = None
    unit_cost: float | None = None  # None = cost unknown


@dataclass(frozen=True)
class FormulaAggregate:
    """Grouped formula with its ordered material lines.

    materials keeps the first-occurrence order of the source rows.
    materials_count is derived from materials and cannot be set separately.
    total_cost is None when no priced line contributes a non-zero amount.
    """
    formula_id: str
    name: str
    materials: tuple[MaterialLine, ...] = ()
    category: str | None = None
    notes: str | None = None
    total_cost: float | None = None

    @property
    def materials_count(self) -> int:
        return len(self.materials)
