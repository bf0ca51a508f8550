from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from ..models.formula import FormulaAggregate
from ..models.processing_result import IngestResult
from .view import Page

"""Plain-text rendering for the CLI.

Currency and placeholder formatting lives here only; the models keep raw
numbers and None.
"""

__all__ = [
    "NOT_AVAILABLE",
    "format_cost",
    "format_number",
    "render_formula_table",
    "render_page",
    "render_materials",
    "summary_metrics",
]

NOT_AVAILABLE = "N/A"
TABLE_COLUMNS = ["Name", "Category", "Description", "Materials", "Total Cost"]


def format_cost(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"${value:.2f}"


def format_number(value: float) -> str:
    """Integers without decimals, small values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_formula_table(formulas: Iterable[FormulaAggregate]) -> str:
    rows = [
        [
            f.name,
            f.category or NOT_AVAILABLE,
            f.notes or NOT_AVAILABLE,
            f.materials_count,
            format_cost(f.total_cost),
        ]
        for f in formulas
    ]
    if not rows:
        return "No formulas match the current filters."
    frame = pd.DataFrame(rows, columns=TABLE_COLUMNS)
    return frame.to_string(index=False)


def render_page(page: Page) -> str:
    return (
        render_formula_table(page.items)
        + f"\nPage {page.page} of {page.page_count} ({page.total} formulas)"
    )


def render_materials(formula: FormulaAggregate) -> str:
    """Detail listing of one formula's material lines."""
    lines = [f"Formula for: {formula.name} ({formula.formula_id})"]
    frame = pd.DataFrame(
        [
            [
                m.material_id,
                m.material_name,
                format_number(m.qty),
                m.uom or "",
                format_cost(m.unit_cost),
            ]
            for m in formula.materials
        ],
        columns=["Material ID", "Material", "Qty", "UOM", "Unit Cost"],
    )
    lines.append(frame.to_string(index=False))
    lines.append(f"Total Cost: {format_cost(formula.total_cost)}")
    return "\n".join(lines)


def summary_metrics(result: IngestResult) -> str:
    """Metrics of an ingestion run for the SUMMARY log line.

    log_summary adds the SUMMARY label. Format:
    files={n} success={s} failed={f} rows={r} accepted={a}
    rejected={j} formulas={k} elapsed_sec={e}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = IngestResult(
        ...     success_files=1, failed_files=0, total_rows=3, accepted_rows=3,
        ...     rejected_rows=0, start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> summary_metrics(result)
        'files=1 success=1 failed=0 rows=3 accepted=3 rejected=0 formulas=0 elapsed_sec=2'
    """
    return (
        f"files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_rows} "
        f"accepted={result.accepted_rows} "
        f"rejected={result.rejected_rows} "
        f"formulas={len(result.formulas)} "
        f"elapsed_sec={format_number(result.elapsed_seconds)}"
    )
