"""Pure grouping and aggregation logic (no I/O, no logging)."""

from .grouping import compute_total_cost, flatten_formulas, group_rows

__all__ = [
    "group_rows",
    "flatten_formulas",
    "compute_total_cost",
]
