# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from formulary.logging.init import reset_logging
from formulary.models.flat_row import FlatRow

SAMPLE_CSV = """formula_id,formula_name,category,notes,material_id,material_name,qty,uom,unit_cost
F001,Sunrise Burst,Fresh,Bright citrus opening,M001,Lemon Oil,10,g,0.5
F001,Sunrise Burst,Fresh,Bright citrus opening,M002,Orange Oil,5,g,0.4
F002,Moonlight Petals,Floral,Elegant rose heart,M010,Rose Absolute,3,g,2.0
F003,Unpriced Accord,,,M020,Iso E Super,7,g,
"""


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("FORMULARY_CONFIG", raising=False)
        reset_logging()
        yield p


@pytest.fixture()
def sample_csv_text() -> str:
    return SAMPLE_CSV


@pytest.fixture()
def sample_csv(temp_workdir: Path, sample_csv_text: str) -> Path:
    path = temp_workdir / "data" / "formulas.csv"
    path.write_text(sample_csv_text, encoding="utf-8")
    return path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
null_sentinels: ["N/A", "-"]
page_size: 5
logs_directory: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "formulary.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_row():
    """Factory for FlatRow with sensible defaults for the required fields."""
    def _make(formula_id: str = "F001", material_id: str = "M001", **kwargs) -> FlatRow:
        values = {
            "formula_id": formula_id,
            "formula_name": kwargs.pop("formula_name", f"Formula {formula_id}"),
            "material_id": material_id,
            "material_name": kwargs.pop("material_name", f"Material {material_id}"),
            "qty": kwargs.pop("qty", 1),
        }
        values.update(kwargs)
        return FlatRow(**values)
    return _make
