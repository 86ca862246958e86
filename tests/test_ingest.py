from __future__ import annotations

import pytest

from tidyguru.ingest import CsvParseError, guess_delimiter, read_csv_bytes, read_csv_file, read_csv_text


def test_reads_headers_in_file_order_and_rows_as_strings():
    t = read_csv_text("Product,Date,Amount\nMug,2025-01-02,12.50\nHat,2025-01-03,\n")

    assert t.headers == ["Product", "Date", "Amount"]
    assert len(t.rows) == 2
    assert t.rows[0] == {"Product": "Mug", "Date": "2025-01-02", "Amount": "12.50"}
    assert list(t.rows[0]) == ["Product", "Date", "Amount"]
    # blank cells stay blank strings
    assert t.rows[1]["Amount"] == ""


def test_blank_lines_are_skipped():
    t = read_csv_text("Date,Amount\n2025-01-01,1\n\n2025-01-02,2\n\n")
    assert len(t.rows) == 2


def test_short_rows_are_padded_with_blanks():
    t = read_csv_text("a,b,c\n1,2\n")
    assert t.rows[0]["c"] == ""


def test_quoted_fields_keep_commas():
    t = read_csv_text('Date,Product,Amount\n2025-01-01,"Mug, large","$1,200.00"\n')
    assert t.rows[0]["Product"] == "Mug, large"
    assert t.rows[0]["Amount"] == "$1,200.00"


def test_header_only_file_is_rejected():
    with pytest.raises(CsvParseError, match="no data rows"):
        read_csv_text("Date,Product,Amount\n")


def test_empty_file_is_rejected():
    with pytest.raises(CsvParseError):
        read_csv_bytes(b"")


def test_unterminated_quote_is_rejected():
    with pytest.raises(CsvParseError, match="Malformed CSV"):
        read_csv_text('Date,Product\n2025-01-01,"Widget\n')


def test_latin1_fallback():
    t = read_csv_bytes("Date,Product\n2025-01-01,Café\n".encode("latin-1"))
    assert t.rows[0]["Product"] == "Café"


def test_utf8_bom_is_not_part_of_first_header():
    t = read_csv_bytes("\ufeffDate,Amount\n2025-01-01,5\n".encode("utf-8"))
    assert t.headers[0] == "Date"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_csv_file(tmp_path / "nope.csv")


def test_reads_file_from_disk(tmp_path):
    p = tmp_path / "orders.csv"
    p.write_text("Date,Amount\n2025-01-01,5\n", encoding="utf-8")
    assert read_csv_file(p).rows == [{"Date": "2025-01-01", "Amount": "5"}]


def test_trailing_delimiter_on_every_row_keeps_columns_aligned():
    t = read_csv_text("Date,Product,Amount\n2025-01-15,Mug,10.00,\n2025-01-16,Hat,20.00,\n")

    assert t.headers == ["Date", "Product", "Amount"]
    assert t.rows[0] == {"Date": "2025-01-15", "Product": "Mug", "Amount": "10.00"}
    assert t.rows[1]["Date"] == "2025-01-16"


def test_extra_field_mid_file_is_rejected():
    with pytest.raises(CsvParseError, match="Malformed CSV"):
        read_csv_text("Date,Product,Amount\n2025-01-15,Mug,10.00\n2025-01-16,Hat,20.00,oops\n")


@pytest.mark.parametrize("sep", [";", "\t", "|"])
def test_other_delimiters_are_detected_from_the_header(sep):
    text = sep.join(["Date", "Product", "Amount"]) + "\n" + sep.join(["2025-01-15", "Mug", "1,50"]) + "\n"
    t = read_csv_text(text)

    assert t.headers == ["Date", "Product", "Amount"]
    assert t.rows[0]["Amount"] == "1,50"


def test_guess_delimiter_defaults_to_comma():
    assert guess_delimiter(b"Amount\n5\n") == ","
    assert guess_delimiter(b"") == ","
    assert guess_delimiter(b"a,b;c,d\n") == ","
