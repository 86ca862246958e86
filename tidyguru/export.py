from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterable

import pandas as pd

from tidyguru.clean import SalesRecord


EXPORT_COLUMNS = ["Date", "Product", "Amount", "Refund", "Fees", "Net"]


def _money(x: float) -> str:
    return f"{x:.2f}"


def export_frame(records: Iterable[SalesRecord]) -> pd.DataFrame:
    rows = [
        [
            r.date.strftime("%Y-%m-%d"),
            r.product,
            _money(r.amount),
            _money(r.refund),
            _money(r.fees),
            _money(r.net),
        ]
        for r in records
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def default_export_name(today: date | None = None) -> str:
    return f"sales-data-{(today or date.today()):%Y-%m-%d}.csv"


def write_export_csv(records: Iterable[SalesRecord], out_path: Path) -> int:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df = export_frame(records)
    df.to_csv(out_path, index=False)
    return len(df)
