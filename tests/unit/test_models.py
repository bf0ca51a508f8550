from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from pathlib import Path

import pytest

from formulary.models import (
    FileStatus,
    FlatRow,
    FormulaAggregate,
    IngestResult,
    MaterialLine,
    SourceFile,
)
from formulary.models.flat_row import COLUMNS


def test_flat_row_defaults():
    row = FlatRow("F001", "Name", "M001", "Mat", 2)
    assert row.category is None
    assert row.notes is None
    assert row.uom is None
    assert row.unit_cost is None
    assert row.qty_defaulted is False


def test_flat_row_is_frozen():
    row = FlatRow("F001", "Name", "M001", "Mat", 2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        row.qty = 3


def test_flat_row_to_record_uses_column_order():
    row = FlatRow("F001", "Name", "M001", "Mat", 2, category="C", unit_cost=1.5)
    record = row.to_record()
    assert list(record) == list(COLUMNS)
    assert record["unit_cost"] == 1.5
    assert "qty_defaulted" not in record


def test_materials_count_is_derived():
    formula = FormulaAggregate(
        formula_id="F001",
        name="Name",
        materials=(MaterialLine("M1", "One", 1), MaterialLine("M2", "Two", 2)),
    )
    assert formula.materials_count == 2
    with pytest.raises(AttributeError):
        formula.materials_count = 5


def test_formula_aggregate_equality():
    a = FormulaAggregate("F001", "Name", (MaterialLine("M1", "One", 1),), total_cost=None)
    b = FormulaAggregate("F001", "Name", (MaterialLine("M1", "One", 1),), total_cost=None)
    assert a == b


def test_source_file_defaults():
    source = SourceFile(path=Path("data/a.csv"), name="a.csv")
    assert source.status == FileStatus.PENDING
    assert source.accepted_rows == 0
    assert source.error is None


def test_ingest_result_derived_counts():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    result = IngestResult(
        success_files=2,
        failed_files=1,
        total_rows=4,
        accepted_rows=3,
        rejected_rows=1,
        start_time=now,
        end_time=now,
        elapsed_seconds=0.0,
        formulas=[
            FormulaAggregate("F1", "A", total_cost=1.0),
            FormulaAggregate("F2", "B"),
        ],
    )
    assert result.total_files == 3
    assert result.priced_formulas == 1
