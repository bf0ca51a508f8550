from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from formulary.ingest.reader import (
    EmptyFileError,
    MissingColumnsError,
    UnsupportedFileError,
    normalize_rows,
    read_table,
)

HEADER = "formula_id,formula_name,category,notes,material_id,material_name,qty,uom,unit_cost\n"


def _write(tmp_path: Path, name: str, text: str, encoding: str = "utf-8") -> Path:
    p = tmp_path / name
    p.write_text(text, encoding=encoding)
    return p


def test_read_and_normalize_sample(sample_csv: Path):
    df = read_table(sample_csv)
    table = normalize_rows(df, sample_csv.name)
    assert table.columns[:3] == ["formula_id", "formula_name", "category"]
    assert len(table.rows) == 4
    first = table.rows[0]
    assert first.formula_id == "F001"
    assert first.qty == 10.0
    assert first.unit_cost == 0.5
    assert first.uom == "g"
    last = table.rows[3]
    assert last.category is None
    assert last.notes is None
    assert last.unit_cost is None


def test_ids_stay_text(tmp_path: Path):
    p = _write(tmp_path, "ids.csv", HEADER + "001,Zero,,,0042,Mat,1,g,\n")
    table = normalize_rows(read_table(p), p.name)
    assert table.rows[0].formula_id == "001"
    assert table.rows[0].material_id == "0042"


def test_rows_missing_required_fields_are_rejected(tmp_path: Path):
    p = _write(
        tmp_path,
        "missing.csv",
        HEADER
        + "F001,One,,,M001,Mat,1,g,\n"
        + ",NoId,,,M002,Mat,1,g,\n"
        + "F002,Two,,,,Mat,1,g,\n"
        + "F003,Three,,,M003,,1,g,\n",
    )
    table = normalize_rows(read_table(p), p.name)
    assert [r.formula_id for r in table.rows] == ["F001"]
    assert [i.row for i in table.rejected] == [3, 4, 5]
    assert all(i.error_type == "MISSING_REQUIRED_FIELD" for i in table.rejected)
    assert "material_name" in table.rejected[2].message
    assert table.total_rows == 4


def test_blank_lines_are_skipped_and_line_numbers_kept(tmp_path: Path):
    p = _write(tmp_path, "blank.csv", HEADER + "F001,One,,,M001,Mat,1,g,\n\n,,,,,,,,\n,Bad,,,,,,,\n")
    table = normalize_rows(read_table(p), p.name)
    assert len(table.rows) == 1
    assert [i.row for i in table.rejected] == [5]


def test_unparsable_qty_defaults_to_zero(tmp_path: Path):
    p = _write(tmp_path, "qty.csv", HEADER + "F001,One,,,M001,Mat,abc,g,1.0\nF001,One,,,M002,Mat,,g,1.0\n")
    table = normalize_rows(read_table(p), p.name)
    assert [r.qty for r in table.rows] == [0, 0]
    assert all(r.qty_defaulted for r in table.rows)


def test_unit_cost_absent_stays_none_not_zero(tmp_path: Path):
    p = _write(tmp_path, "cost.csv", HEADER + "F001,One,,,M001,Mat,2,g,\nF001,One,,,M002,Mat,2,g,0\n")
    table = normalize_rows(read_table(p), p.name)
    assert table.rows[0].unit_cost is None
    assert table.rows[1].unit_cost == 0.0
    assert table.warnings == []


def test_invalid_unit_cost_is_warning_and_unknown(tmp_path: Path):
    p = _write(tmp_path, "badcost.csv", HEADER + "F001,One,,,M001,Mat,2,g,cheap\n")
    table = normalize_rows(read_table(p), p.name)
    assert len(table.rows) == 1
    assert table.rows[0].unit_cost is None
    assert table.warnings[0].error_type == "INVALID_UNIT_COST"
    assert table.warnings[0].row == 2


def test_optional_columns_may_be_absent(tmp_path: Path):
    p = _write(tmp_path, "min.csv", "formula_id,formula_name,material_id,material_name,qty\nF1,One,M1,Mat,4\n")
    table = normalize_rows(read_table(p), p.name)
    row = table.rows[0]
    assert row.category is None and row.uom is None and row.unit_cost is None
    assert row.qty == 4.0


def test_missing_required_column_raises(tmp_path: Path):
    p = _write(tmp_path, "nocol.csv", "formula_id,formula_name,material_id\nF1,One,M1\n")
    with pytest.raises(MissingColumnsError) as e:
        normalize_rows(read_table(p), p.name)
    assert "material_name" in str(e.value) and "qty" in str(e.value)


def test_empty_file_raises(tmp_path: Path):
    p = _write(tmp_path, "empty.csv", "")
    with pytest.raises(EmptyFileError):
        read_table(p)


def test_header_only_gives_no_rows(tmp_path: Path):
    p = _write(tmp_path, "header.csv", HEADER)
    table = normalize_rows(read_table(p), p.name)
    assert table.rows == [] and table.rejected == []


def test_unsupported_suffix(tmp_path: Path):
    p = _write(tmp_path, "data.json", "{}")
    with pytest.raises(UnsupportedFileError):
        read_table(p)


def test_whitespace_is_stripped(tmp_path: Path):
    p = _write(tmp_path, "ws.csv", HEADER + " F001 , One ,  , note ,M001, Mat , 2 , g , 1.5 \n")
    row = normalize_rows(read_table(p), p.name).rows[0]
    assert row.formula_id == "F001"
    assert row.category is None
    assert row.notes == "note"
    assert row.qty == 2.0
    assert row.unit_cost == 1.5


def test_null_sentinels_case_insensitive(tmp_path: Path):
    p = _write(tmp_path, "sent.csv", HEADER + "F001,One,none,-,M001,Mat,2,g,\n")
    df = read_table(p)
    row = normalize_rows(df, p.name, null_sentinels={"NONE", "-"}).rows[0]
    assert row.category is None
    assert row.notes is None


def test_na_like_text_is_kept_literally(tmp_path: Path):
    p = _write(tmp_path, "na.csv", HEADER + "F001,One,NA,n/a,M001,None,2,g,\n")
    table = normalize_rows(read_table(p), p.name)
    assert table.rejected == []
    row = table.rows[0]
    assert row.category == "NA"
    assert row.notes == "n/a"
    assert row.material_name == "None"


def test_na_like_text_mapped_only_by_sentinels(tmp_path: Path):
    p = _write(tmp_path, "na.csv", HEADER + "F001,One,NA,n/a,M001,Mat,2,g,\n")
    row = normalize_rows(read_table(p), p.name, null_sentinels={"NA"}).rows[0]
    assert row.category is None
    assert row.notes == "n/a"


def test_xls_is_not_supported(tmp_path: Path):
    p = _write(tmp_path, "old.xls", "not a workbook")
    with pytest.raises(UnsupportedFileError):
        read_table(p)


def test_cp1252_fallback(tmp_path: Path):
    p = _write(tmp_path, "legacy.csv", HEADER + "F001,Crème,,,M001,Café Absolute,1,g,\n", encoding="cp1252")
    row = normalize_rows(read_table(p), p.name).rows[0]
    assert row.formula_name == "Crème"
    assert row.material_name == "Café Absolute"


def test_read_excel(tmp_path: Path):
    p = tmp_path / "formulas.xlsx"
    pd.DataFrame(
        [["F001", "One", "M001", "Mat", 3, 0.5], ["F001", "One", "M002", "Mat2", 2, None]],
        columns=["formula_id", "formula_name", "material_id", "material_name", "qty", "unit_cost"],
    ).to_excel(p, index=False)
    table = normalize_rows(read_table(p), p.name)
    assert len(table.rows) == 2
    assert table.rows[0].qty == 3.0
    assert table.rows[0].unit_cost == 0.5
    assert table.rows[1].unit_cost is None
