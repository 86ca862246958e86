from __future__ import annotations

import pytest

from tidyguru.clean import parse_csv
from tidyguru.session import Session, load_session, save_session

from conftest import TODAY


def test_replace_swaps_the_whole_collection(sample_bytes):
    first = Session().replace(parse_csv(sample_bytes, today=TODAY), file_name="jan.csv")
    assert len(first.records) == 20
    assert first.columns == ("Date", "Product", "Amount", "Refund", "Fees")

    second = first.replace(parse_csv(b"Date,Amount\n2025-02-01,5\n", today=TODAY), file_name="feb.csv")
    assert len(second.records) == 1
    assert second.file_name == "feb.csv"
    # the old session is untouched
    assert len(first.records) == 20

    assert first.clear().is_empty
    assert first.clear().file_name == ""


def test_save_and_load(tmp_path, sample_bytes):
    s = Session().replace(parse_csv(sample_bytes, today=TODAY), file_name="jan.csv")
    path = tmp_path / "state" / "session.json"
    save_session(path, s)
    assert load_session(path) == s


def test_missing_session_file_is_an_empty_session(tmp_path):
    assert load_session(tmp_path / "none.json").is_empty


def test_corrupt_session_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text('{"records": [{"product": "x"}]}', encoding="utf-8")
    with pytest.raises(ValueError, match="Corrupt session"):
        load_session(path)


def test_restored_session_rebuilds_the_parse_view(tmp_path, sample_bytes):
    parsed = parse_csv(sample_bytes, today=TODAY)
    path = tmp_path / "session.json"
    save_session(path, Session().replace(parsed, file_name="jan.csv"))

    result = load_session(path).as_result()
    assert result.records == parsed.records
    assert result.columns == parsed.columns
    assert result.mapping == parsed.mapping
    assert result.warnings == parsed.warnings
