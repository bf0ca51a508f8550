from __future__ import annotations

import math
from collections.abc import Iterable
from numbers import Real
from typing import Any

from ..models.flat_row import FlatRow
from ..models.formula import FormulaAggregate, MaterialLine

"""Row grouping & aggregation engine.

Reshapes a flat sequence of formula/material rows into one FormulaAggregate
per distinct formula_id.

Guarantees:
- aggregates are emitted in first-seen formula_id order
- materials keep first-seen row order inside their formula
- name / category / notes come from the first row of each formula
- no row is dropped, duplicated or reordered

The module is pure: it performs no I/O, keeps no state between calls and
raises nothing for rows of the documented shape.
"""

__all__ = [
    "group_rows",
    "flatten_formulas",
    "compute_total_cost",
    "coerce_qty",
]


def coerce_qty(value: Any) -> float:
    """Return value as a number, or 0 when it is not numeric.

    Finite real numbers pass through untouched (bool excluded); anything else
    is parsed with float(str(value)). NaN and infinities become 0.
    """
    if isinstance(value, Real) and not isinstance(value, bool):
        return value if math.isfinite(value) else 0
    try:
        parsed = float(str(value).strip())
    except (TypeError, ValueError):
        return 0
    return parsed if math.isfinite(parsed) else 0


def compute_total_cost(materials: Iterable[MaterialLine]) -> float | None:
    """Sum qty * unit_cost over lines with a known unit_cost.

    Lines without unit_cost contribute nothing. A sum of exactly zero is
    reported as None, so "no pricing data" and "zero cost" are not told apart.
    """
    total = 0.0
    for line in materials:
        if line.unit_cost is not None:
            total += line.qty * line.unit_cost
    return total if total != 0 else None


def _to_material(row: FlatRow) -> MaterialLine:
    return MaterialLine(
        material_id=row.material_id,
        material_name=row.material_name,
        qty=coerce_qty(row.qty),
        uom=row.uom,
        unit_cost=row.unit_cost,
    )


def group_rows(rows: Iterable[FlatRow]) -> list[FormulaAggregate]:
    """Group flat rows into FormulaAggregate records.

    Args:
        rows: Flat rows in source order. Required string fields are assumed
            present (the ingestion boundary filters rows that lack them).

    Returns:
        One aggregate per distinct formula_id, in first-seen order.

    Examples:
        >>> rows = [
        ...     FlatRow("F001", "Sunrise Burst", "M001", "Lemon Oil", 10, unit_cost=0.5),
        ...     FlatRow("F001", "Sunrise Burst", "M002", "Orange Oil", 5, unit_cost=1.0),
        ... ]
        >>> [(f.formula_id, f.materials_count, f.total_cost) for f in group_rows(rows)]
        [('F001', 2, 10.0)]
    """
    # dict preserves insertion order -> first-seen group order
    grouped: dict[str, list[FlatRow]] = {}
    for row in rows:
        grouped.setdefault(row.formula_id, []).append(row)

    formulas: list[FormulaAggregate] = []
    for formula_rows in grouped.values():
        first = formula_rows[0]
        materials = tuple(_to_material(r) for r in formula_rows)
        formulas.append(
            FormulaAggregate(
                formula_id=first.formula_id,
                name=first.formula_name,
                category=first.category,
                notes=first.notes,
                materials=materials,
                total_cost=compute_total_cost(materials),
            )
        )
    return formulas


def flatten_formulas(formulas: Iterable[FormulaAggregate]) -> list[FlatRow]:
    """Inverse of group_rows: one FlatRow per material line.

    The formula metadata is re-attached to every row so that grouping the
    result again yields an equivalent aggregate list.
    """
    rows: list[FlatRow] = []
    for formula in formulas:
        for line in formula.materials:
            rows.append(
                FlatRow(
                    formula_id=formula.formula_id,
                    formula_name=formula.name,
                    category=formula.category,
                    notes=formula.notes,
                    material_id=line.material_id,
                    material_name=line.material_name,
                    qty=line.qty,
                    uom=line.uom,
                    unit_cost=line.unit_cost,
                )
            )
    return rows
