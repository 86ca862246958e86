from __future__ import annotations

from datetime import date

from tidyguru.export import EXPORT_COLUMNS, default_export_name, export_frame, write_export_csv

from conftest import make_record


def _recs():
    return [
        make_record(date(2025, 1, 15), "Starter Plan", amount=29, fees=0.87),
        make_record(date(2025, 1, 18), "Mug, large", refund=29),
    ]


def test_export_frame_columns_and_formatting():
    df = export_frame(_recs())
    assert list(df.columns) == EXPORT_COLUMNS
    assert df.iloc[0].tolist() == ["2025-01-15", "Starter Plan", "29.00", "0.00", "0.87", "28.13"]
    assert df.iloc[1].tolist() == ["2025-01-18", "Mug, large", "0.00", "29.00", "0.00", "-29.00"]


def test_export_frame_of_nothing():
    df = export_frame([])
    assert list(df.columns) == EXPORT_COLUMNS
    assert df.empty


def test_write_export_csv(tmp_path):
    out = tmp_path / "exports" / "sales.csv"
    assert write_export_csv(_recs(), out) == 2
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Date,Product,Amount,Refund,Fees,Net"
    assert lines[1] == "2025-01-15,Starter Plan,29.00,0.00,0.87,28.13"
    assert lines[2] == '2025-01-18,"Mug, large",0.00,29.00,0.00,-29.00'


def test_default_export_name():
    assert default_export_name(date(2025, 1, 2)) == "sales-data-2025-01-02.csv"
