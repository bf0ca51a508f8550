from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from ..models.formula import FormulaAggregate

"""View state, filtering, sorting and pagination over grouped formulas.

ViewState is an explicit, immutable container owned by the caller; every
change returns a new instance. The grouping engine never reads it.
"""

__all__ = [
    "ViewState",
    "Page",
    "SORT_KEYS",
    "DEFAULT_PAGE_SIZE",
    "filter_formulas",
    "sort_formulas",
    "paginate",
    "categories",
]

DEFAULT_PAGE_SIZE = 5

SORT_KEYS: dict[str, Callable[[FormulaAggregate], Any]] = {
    "name": lambda f: f.name,
    "category": lambda f: f.category,
    "notes": lambda f: f.notes,
    "materials_count": lambda f: f.materials_count,
    "total_cost": lambda f: f.total_cost,
}


@dataclass(frozen=True)
class Page:
    items: list[FormulaAggregate]
    page: int  # 1-based
    page_count: int
    total: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count


def _matches_search(formula: FormulaAggregate, needle: str) -> bool:
    for text in (formula.name, formula.category, formula.notes):
        if text and needle in text.lower():
            return True
    return False


def filter_formulas(
    formulas: Iterable[FormulaAggregate],
    search: str | None = None,
    category: str | None = None,
) -> list[FormulaAggregate]:
    """Keep formulas matching the category (exact) and search text.

    Search is a case-insensitive substring match over name, category and
    notes. Empty search or category means no filtering on that criterion.
    """
    needle = search.strip().lower() if search else ""
    result = []
    for formula in formulas:
        if category and formula.category != category:
            continue
        if needle and not _matches_search(formula, needle):
            continue
        result.append(formula)
    return result


def sort_formulas(
    formulas: Iterable[FormulaAggregate],
    key: str,
    descending: bool = False,
) -> list[FormulaAggregate]:
    """Stable sort by one column; None values are always placed last."""
    try:
        getter = SORT_KEYS[key]
    except KeyError:
        raise ValueError(f"unknown sort key '{key}' (expected one of {sorted(SORT_KEYS)})") from None

    items = list(formulas)
    present = [f for f in items if getter(f) is not None]
    missing = [f for f in items if getter(f) is None]

    def sort_value(f: FormulaAggregate) -> Any:
        value = getter(f)
        return value.lower() if isinstance(value, str) else value

    present.sort(key=sort_value, reverse=descending)
    return present + missing


def paginate(
    items: Sequence[FormulaAggregate],
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page:
    """Slice items into 1-based pages; out-of-range pages are clamped."""
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    total = len(items)
    page_count = max(1, math.ceil(total / page_size))
    page = min(max(page, 1), page_count)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        page_count=page_count,
        total=total,
    )


def categories(formulas: Iterable[FormulaAggregate]) -> list[str]:
    """Distinct non-empty categories in first-seen order."""
    seen: dict[str, None] = {}
    for formula in formulas:
        if formula.category:
            seen.setdefault(formula.category, None)
    return list(seen)


@dataclass(frozen=True)
class ViewState:
    """Caller-owned state of a formula listing."""
    formulas: tuple[FormulaAggregate, ...] = field(default_factory=tuple)
    search: str = ""
    category_filter: str | None = None
    selected_formula_id: str | None = None
    sort_key: str | None = None
    descending: bool = False
    page_size: int = DEFAULT_PAGE_SIZE

    def with_formulas(self, formulas: Iterable[FormulaAggregate]) -> ViewState:
        return replace(self, formulas=tuple(formulas))

    def with_search(self, search: str) -> ViewState:
        return replace(self, search=search)

    def with_category(self, category: str | None) -> ViewState:
        return replace(self, category_filter=category)

    def with_sort(self, key: str | None, descending: bool = False) -> ViewState:
        if key is not None and key not in SORT_KEYS:
            raise ValueError(f"unknown sort key '{key}'")
        return replace(self, sort_key=key, descending=descending)

    def select(self, formula_id: str | None) -> ViewState:
        return replace(self, selected_formula_id=formula_id)

    def visible(self) -> list[FormulaAggregate]:
        """Formulas after filtering and (optional) sorting."""
        items = filter_formulas(self.formulas, self.search, self.category_filter)
        if self.sort_key is not None:
            items = sort_formulas(items, self.sort_key, self.descending)
        return items

    def page(self, number: int = 1) -> Page:
        return paginate(self.visible(), number, self.page_size)

    def selected(self) -> FormulaAggregate | None:
        if self.selected_formula_id is None:
            return None
        for formula in self.formulas:
            if formula.formula_id == self.selected_formula_id:
                return formula
        return None
