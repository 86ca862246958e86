from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd


TREND_POINTS = 10


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def save_line_chart(x, y, title: str, ylabel: str, out_path: Path) -> None:
    fig = plt.figure()
    plt.plot(x, y, marker="o")
    plt.title(title)
    plt.xlabel("Date")
    plt.ylabel(ylabel)
    plt.xticks(rotation=45, ha="right")
    plt.tight_layout()
    fig.savefig(out_path, dpi=200)
    plt.close(fig)


def save_bar_chart(labels, values, title: str, ylabel: str, out_path: Path, max_label: int = 20) -> None:
    # long product names get cut like the dashboard does
    short = [s if len(s) <= max_label else s[:max_label] + "..." for s in map(str, labels)]

    fig = plt.figure()
    plt.bar(short, list(values))
    plt.title(title)
    plt.xlabel("")
    plt.ylabel(ylabel)
    plt.xticks(rotation=45, ha="right")
    plt.tight_layout()
    fig.savefig(out_path, dpi=200)
    plt.close(fig)


def generate_charts(
    trends: pd.DataFrame,
    top_products: pd.DataFrame,
    out_dir: Path,
    currency_code: str = "USD",
) -> list[Path]:
    """
    Creates PNG charts and returns the list of generated file paths.
    Uses:
      - trends (net revenue per date, last 10 points)
      - top_products (net revenue per product)
    """
    ensure_dir(out_dir)
    created: list[Path] = []
    ylabel = f"Net Revenue ({(currency_code or 'USD').upper().strip()})"

    if not trends.empty and {"date", "revenue"}.issubset(trends.columns):
        t = trends.copy()
        t["date"] = pd.to_datetime(t["date"], errors="coerce")
        t = t.dropna(subset=["date"]).sort_values("date").tail(TREND_POINTS)
        if len(t) >= 2:
            p = out_dir / "revenue_trend.png"
            save_line_chart(t["date"].dt.strftime("%b %d"), t["revenue"], "Revenue Trend", ylabel, p)
            created.append(p)

    if not top_products.empty and {"product", "revenue"}.issubset(top_products.columns):
        p = out_dir / "top_products.png"
        save_bar_chart(
            labels=top_products["product"],
            values=top_products["revenue"],
            title=f"Top {len(top_products)} Products",
            ylabel=ylabel,
            out_path=p,
        )
        created.append(p)

    return created
