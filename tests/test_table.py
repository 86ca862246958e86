from __future__ import annotations

from datetime import date

from tidyguru.table import search_records, table_preview

from conftest import make_record


def _recs():
    return [
        make_record(date(2025, 1, 1), "Blue Mug", amount=10),
        make_record(date(2025, 1, 2), "Red Hat", amount=20),
        make_record(date(2025, 1, 3), "blue hat", amount=30),
    ]


def test_search_matches_any_raw_cell_case_insensitively():
    out = search_records(_recs(), "BLUE")
    assert [r.product for r in out] == ["Blue Mug", "blue hat"]
    assert [r.product for r in search_records(_recs(), "2025-01-02")] == ["Red Hat"]


def test_empty_search_keeps_everything():
    assert len(search_records(_recs(), "")) == 3
    assert len(search_records(_recs(), None)) == 3


def test_preview_uses_original_column_order():
    p = table_preview(_recs(), ["Product", "Date"], query="hat")
    assert p.columns == ["Product", "Date"]
    assert p.rows == [["Red Hat", "2025-01-02"], ["blue hat", "2025-01-03"]]
    assert p.caption() == "2 rows"
    assert not p.truncated


def test_preview_is_capped():
    recs = [make_record(date(2025, 1, 1), f"P{i}", amount=1) for i in range(250)]
    p = table_preview(recs, ["Product"])
    assert len(p.rows) == 100
    assert p.total_matches == 250
    assert p.caption() == "Showing first 100 of 250 rows"
