from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd


class CsvParseError(ValueError):
    """The upload could not be read as a CSV with a header and data rows."""


@dataclass(frozen=True)
class RawTable:
    headers: list[str]
    rows: list[dict[str, Any]]


DELIMITERS = (",", ";", "\t", "|")


def guess_delimiter(data: bytes) -> str:
    """Pick the delimiter that splits the header line most often (comma on a tie)."""
    # delimiters are ASCII, so latin-1 is safe for any encoding
    text = data[:4096].decode("latin-1").lstrip("\r\n")
    header = text.splitlines()[0] if text else ""
    best = max(DELIMITERS, key=header.count)
    return best if header.count(best) else ","


def _read_frame(data: bytes) -> pd.DataFrame:
    # Every cell stays a string; blank cells are "" rather than NaN.
    # index_col=False keeps a trailing delimiter on every row from becoming an index.
    opts = dict(
        sep=guess_delimiter(data),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        index_col=False,
    )
    try:
        try:
            return pd.read_csv(io.BytesIO(data), encoding="utf-8-sig", **opts)
        except UnicodeDecodeError:
            return pd.read_csv(io.BytesIO(data), encoding="latin-1", **opts)
    except pd.errors.EmptyDataError as e:
        raise CsvParseError("CSV file is empty") from e
    except pd.errors.ParserError as e:
        raise CsvParseError(f"Malformed CSV: {e}") from e


def read_csv_bytes(data: bytes) -> RawTable:
    df = _read_frame(data)
    if df.empty:
        raise CsvParseError("CSV has no data rows")

    # short rows leave NaN in trailing columns
    df = df.fillna("")
    headers = [str(c) for c in df.columns]
    df.columns = headers
    return RawTable(headers=headers, rows=df.to_dict(orient="records"))


def read_csv_text(text: str) -> RawTable:
    return read_csv_bytes(text.encode("utf-8"))


def read_csv_file(path: Path) -> RawTable:
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return read_csv_bytes(path.read_bytes())
