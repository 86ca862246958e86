from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

import pandas as pd

from tidyguru.clean import SalesRecord


FRAME_COLUMNS = ["date", "product", "amount", "refund", "fees", "quantity", "net"]

PRESETS = ("week", "month", "all")


@dataclass(frozen=True)
class DateRange:
    start: date | None = None
    end: date | None = None

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def label(self) -> str:
        if self.start is None:
            return "All time"
        if self.end is None:
            return f"From {self.start:%Y-%m-%d}"
        return f"{self.start:%Y-%m-%d} to {self.end:%Y-%m-%d}"


@dataclass(frozen=True)
class AggregateMetrics:
    gross_sales: float = 0.0
    total_refunds: float = 0.0
    total_fees: float = 0.0
    net_revenue: float = 0.0
    orders_count: int = 0
    avg_order_value: float = 0.0
    best_product: str | None = None
    best_product_revenue: float = 0.0
    conversion_rate: float = 0.0
    total_quantity: int = 0
    record_count: int = 0


@dataclass(frozen=True)
class RevenuePoint:
    date: date
    revenue: float


@dataclass(frozen=True)
class ProductRevenue:
    product: str
    revenue: float


def preset_range(preset: str, today: date | None = None, week_starts_on: int = 0) -> DateRange:
    """
    week  -> start of the current week through today
    month -> the last 30 days through today
    all   -> unrestricted

    week_starts_on: 0 = Sunday ... 6 = Saturday.
    """
    today = today or date.today()
    if preset == "week":
        # date.weekday() counts from Monday
        days_back = (today.weekday() + 1 - week_starts_on) % 7
        return DateRange(start=today - timedelta(days=days_back), end=today)
    if preset == "month":
        return DateRange(start=today - timedelta(days=30), end=today)
    if preset == "all":
        return DateRange()
    raise ValueError(f"Unknown date preset: {preset!r} (expected one of {', '.join(PRESETS)})")


def filter_by_date_range(records: Iterable[SalesRecord], date_range: DateRange | None) -> list[SalesRecord]:
    records = list(records)
    # An end date on its own does not restrict anything
    if date_range is None or date_range.start is None:
        return records

    start, end = date_range.start, date_range.end
    if end is None:
        return [r for r in records if r.date >= start]
    return [r for r in records if start <= r.date <= end]


def records_to_frame(records: Iterable[SalesRecord]) -> pd.DataFrame:
    records = list(records)
    df = pd.DataFrame(
        {
            "date": [r.date for r in records],
            "product": [r.product for r in records],
            "amount": [r.amount for r in records],
            "refund": [r.refund for r in records],
            "fees": [r.fees for r in records],
            "quantity": [r.quantity for r in records],
        }
    )
    df = df.astype({"amount": "float64", "refund": "float64", "fees": "float64", "quantity": "int64"})
    df["net"] = df["amount"] - df["refund"] - df["fees"]
    return df[FRAME_COLUMNS]


def _net_by_product(df: pd.DataFrame) -> pd.Series:
    # sort=False keeps first-seen order so ties resolve to the earliest product
    return df.groupby("product", sort=False)["net"].sum()


def compute_metrics(records: Iterable[SalesRecord]) -> AggregateMetrics:
    df = records_to_frame(records)
    n = len(df)
    if n == 0:
        return AggregateMetrics()

    gross = float(df["amount"].sum())
    refunds = float(df["refund"].sum())
    fees = float(df["fees"].sum())
    orders = int((df["amount"] > 0).sum())

    by_product = _net_by_product(df)
    best = by_product.idxmax()

    return AggregateMetrics(
        gross_sales=gross,
        total_refunds=refunds,
        total_fees=fees,
        net_revenue=gross - refunds - fees,
        orders_count=orders,
        avg_order_value=gross / orders if orders else 0.0,
        best_product=str(best),
        best_product_revenue=float(by_product[best]),
        conversion_rate=orders / n * 100,
        total_quantity=int(df["quantity"].sum()),
        record_count=n,
    )


def compute_revenue_series(records: Iterable[SalesRecord]) -> list[RevenuePoint]:
    df = records_to_frame(records)
    if df.empty:
        return []
    by_date = df.groupby("date", sort=True)["net"].sum()
    return [RevenuePoint(date=d, revenue=float(v)) for d, v in by_date.items()]


def compute_top_products(records: Iterable[SalesRecord], top_n: int = 5) -> list[ProductRevenue]:
    df = records_to_frame(records)
    if df.empty:
        return []
    ranked = _net_by_product(df).sort_values(ascending=False, kind="stable").head(top_n)
    return [ProductRevenue(product=str(p), revenue=float(v)) for p, v in ranked.items()]


def summary_frame(metrics: AggregateMetrics) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "metric": [
                "gross_sales",
                "total_refunds",
                "total_fees",
                "net_revenue",
                "orders_count",
                "avg_order_value",
                "best_product",
                "best_product_revenue",
                "conversion_rate",
                "total_quantity",
                "record_count",
            ],
            "value": [
                metrics.gross_sales,
                metrics.total_refunds,
                metrics.total_fees,
                metrics.net_revenue,
                metrics.orders_count,
                metrics.avg_order_value,
                metrics.best_product or "N/A",
                metrics.best_product_revenue,
                metrics.conversion_rate,
                metrics.total_quantity,
                metrics.record_count,
            ],
        }
    )


def build_tables(records: Iterable[SalesRecord], top_n: int = 5) -> dict[str, pd.DataFrame]:
    """
    Returns the report tables for an already-filtered record collection:
      - Summary (metric/value)
      - Trends (net revenue per calendar date, ascending)
      - Top_Products (net revenue per product, top N descending)
    """
    records = list(records)

    trends = pd.DataFrame(
        [(p.date, p.revenue) for p in compute_revenue_series(records)],
        columns=["date", "revenue"],
    )
    top = pd.DataFrame(
        [(p.product, p.revenue) for p in compute_top_products(records, top_n=top_n)],
        columns=["product", "revenue"],
    )

    return {
        "Summary": summary_frame(compute_metrics(records)),
        "Trends": trends,
        "Top_Products": top,
    }
