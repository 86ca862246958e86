from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import pandas as pd

from tidyguru.clean import ParseResult


@dataclass(frozen=True)
class QualityReport:
    overview: pd.DataFrame
    detection: pd.DataFrame
    blanks_by_col: pd.DataFrame
    date_range: pd.DataFrame
    product_profile: pd.DataFrame


def build_quality_report(result: ParseResult) -> QualityReport:
    raw = pd.DataFrame([r.raw_data for r in result.records], columns=result.columns)
    n_rows = len(result.records)

    overview = pd.DataFrame(
        {
            "metric": ["rows", "columns", "refund_rows", "duplicate_rows", "warnings"],
            "value": [
                n_rows,
                len(result.columns),
                sum(1 for r in result.records if r.refund > 0),
                int(raw.duplicated().sum()) if n_rows else 0,
                len(result.warnings),
            ],
        }
    )

    detection = pd.DataFrame(
        [(name, col or "(not detected)") for name, col in result.mapping.as_dict().items()],
        columns=["field", "column"],
    )

    # Blank cells per source column (all cells are strings from the reader)
    blank = raw.astype(str).apply(lambda s: s.str.strip().eq("")) if n_rows else raw
    blanks_by_col = pd.DataFrame(
        {
            "column": list(result.columns),
            "blank_count": [int(blank[c].sum()) if n_rows else 0 for c in result.columns],
            "blank_pct": [round(float(blank[c].mean()) * 100, 2) if n_rows else 0.0 for c in result.columns],
            "n_unique": [int(raw[c].nunique()) if n_rows else 0 for c in result.columns],
        }
    ).sort_values("blank_count", ascending=False, kind="stable")

    dates = [r.date for r in result.records]
    date_range = pd.DataFrame(
        {
            "metric": ["min_date", "max_date", "distinct_dates"],
            "value": [
                min(dates).isoformat() if dates else "",
                max(dates).isoformat() if dates else "",
                len(set(dates)),
            ],
        }
    )

    vc = pd.Series([r.product for r in result.records], dtype=object).value_counts().head(10)
    product_profile = pd.DataFrame({"product": vc.index.astype(str), "rows": vc.values.astype(int)})

    return QualityReport(
        overview=overview,
        detection=detection,
        blanks_by_col=blanks_by_col,
        date_range=date_range,
        product_profile=product_profile,
    )


def write_quality_excel(out_path: Path, qr: QualityReport) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="openpyxl") as w:
        qr.overview.to_excel(w, sheet_name="Overview", index=False)
        qr.detection.to_excel(w, sheet_name="Detection", index=False)
        qr.date_range.to_excel(w, sheet_name="DateRange", index=False)
        qr.blanks_by_col.to_excel(w, sheet_name="Blanks", index=False)
        qr.product_profile.to_excel(w, sheet_name="TopProducts", index=False)
