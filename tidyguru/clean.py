from __future__ import annotations

import math
import re
import warnings as _warnings
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Mapping

import pandas as pd

from tidyguru.detect import ColumnMapping, detect_columns
from tidyguru.ingest import RawTable, read_csv_bytes, read_csv_file


# Tried in order; month-first beats day-first for "01/02/2025"
DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y/%m/%d",
    "%d-%m-%Y",
)

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥R₹]")
_WHITESPACE = re.compile(r"\s")
_SEPARATORS = re.compile(r"[,()]")
# the leading number of the cleaned text; anything after it is ignored
_DECIMAL = re.compile(r"\+?(\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")

UNKNOWN_PRODUCT = "Unknown"


@dataclass(frozen=True)
class SalesRecord:
    date: date
    product: str
    amount: float
    refund: float
    fees: float
    quantity: int
    raw_data: dict[str, Any] = field(default_factory=dict)

    @property
    def net(self) -> float:
        return self.amount - self.refund - self.fees


@dataclass(frozen=True)
class ParseResult:
    records: list[SalesRecord]
    columns: list[str]
    mapping: ColumnMapping
    warnings: list[str]


def _finite(x: float) -> float:
    return x if math.isfinite(x) else 0.0


def parse_currency(value: Any) -> float:
    """
    "$1,234.56" -> 1234.56, "(45.00)" -> -45.0, "-10" -> -10.0.
    Only the leading number counts ("1_000" -> 1.0); no leading number gives 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return _finite(float(value))

    s = _CURRENCY_SYMBOLS.sub("", str(value))
    s = _WHITESPACE.sub("", s)
    if not s:
        return 0.0

    negative = s.startswith("-") or s.startswith("(")
    s = _SEPARATORS.sub("", s)
    if s.startswith("-"):
        s = s[1:]

    m = _DECIMAL.match(s)
    if m is None:
        return 0.0
    num = _finite(float(m.group(0)))
    return -abs(num) if negative else num


def parse_quantity(value: Any, default: int = 1) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return abs(int(value)) if math.isfinite(value) else default

    s = str(value).strip().replace(",", "")
    if not s:
        return default
    try:
        num = float(s)
    except ValueError:
        return default
    return abs(int(num)) if math.isfinite(num) else default


def try_parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        return None

    s = str(value).strip()
    if not s:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue

    # General-purpose fallback (ISO timestamps, "15 Jan 2025", ...)
    try:
        with _warnings.catch_warnings():
            _warnings.simplefilter("ignore")
            ts = pd.to_datetime(s, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.date()


def parse_date(value: Any, default: date | None = None) -> date:
    parsed = try_parse_date(value)
    if parsed is not None:
        return parsed
    return default if default is not None else date.today()


def _cell(row: Mapping[str, Any], column: str | None) -> Any:
    if column is None:
        return None
    return row.get(column)


def _is_refund_row(row: Mapping[str, Any]) -> bool:
    return any("refund" in str(v).lower() for v in row.values())


def _normalize(row: Mapping[str, Any], mapping: ColumnMapping, today: date) -> tuple[SalesRecord, bool]:
    parsed_date = try_parse_date(_cell(row, mapping.date_column))

    product_raw = _cell(row, mapping.product_column)
    product = str(product_raw).strip() if product_raw is not None else ""

    amount = parse_currency(_cell(row, mapping.amount_column))

    # Refund rows and negative amounts are refunds, not sales
    is_refund = _is_refund_row(row) or amount < 0

    if mapping.refund_column is not None:
        refund = abs(parse_currency(_cell(row, mapping.refund_column)))
    elif is_refund:
        refund = abs(amount)
    else:
        refund = 0.0

    if is_refund:
        quantity = 0
    elif mapping.quantity_column is not None:
        quantity = parse_quantity(_cell(row, mapping.quantity_column))
    else:
        quantity = 1

    fees = abs(parse_currency(_cell(row, mapping.fees_column))) if mapping.fees_column is not None else 0.0

    rec = SalesRecord(
        date=parsed_date or today,
        product=product or UNKNOWN_PRODUCT,
        amount=0.0 if is_refund else abs(amount),
        refund=refund,
        fees=fees,
        quantity=quantity,
        raw_data=dict(row),
    )
    return rec, parsed_date is None


def normalize_row(row: Mapping[str, Any], mapping: ColumnMapping, today: date | None = None) -> SalesRecord:
    rec, _ = _normalize(row, mapping, today or date.today())
    return rec


def _batch_warnings(mapping: ColumnMapping, bad_dates: int, today: date) -> list[str]:
    warnings: list[str] = []

    if mapping.date_column is None:
        warnings.append(f"No date column detected; all rows dated {today:%Y-%m-%d}")
    elif bad_dates > 0:
        warnings.append(f"Rows with unparseable dates (defaulted to {today:%Y-%m-%d}): {bad_dates}")

    if mapping.amount_column is None:
        warnings.append("No amount column detected; amounts default to 0")

    for col, names in mapping.shared_columns().items():
        warnings.append(f"Column '{col}' matched several fields: {', '.join(names)}")

    return warnings


def parse_table(
    table: RawTable,
    extra_keywords: Mapping[str, Iterable[str]] | None = None,
    today: date | None = None,
) -> ParseResult:
    today = today or date.today()
    mapping = detect_columns(table.headers, extra_keywords=extra_keywords)

    records: list[SalesRecord] = []
    bad_dates = 0
    for row in table.rows:
        rec, defaulted = _normalize(row, mapping, today)
        records.append(rec)
        if defaulted and mapping.date_column is not None:
            bad_dates += 1

    return ParseResult(
        records=records,
        columns=list(table.headers),
        mapping=mapping,
        warnings=_batch_warnings(mapping, bad_dates, today),
    )


def parse_csv(
    data: bytes,
    extra_keywords: Mapping[str, Iterable[str]] | None = None,
    today: date | None = None,
) -> ParseResult:
    return parse_table(read_csv_bytes(data), extra_keywords=extra_keywords, today=today)


def parse_csv_file(
    path: Path,
    extra_keywords: Mapping[str, Iterable[str]] | None = None,
    today: date | None = None,
) -> ParseResult:
    return parse_table(read_csv_file(path), extra_keywords=extra_keywords, today=today)
