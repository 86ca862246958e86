from __future__ import annotations

from pathlib import Path
import pandas as pd

from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter
from openpyxl.formatting.rule import ColorScaleRule


HEADER_FILL = PatternFill("solid", fgColor="E0E7FF")  # light indigo
HEADER_FONT = Font(bold=True)
TITLE_FONT = Font(bold=True, size=12)
CENTER = Alignment(horizontal="center")
LEFT = Alignment(horizontal="left")

PERCENT_METRICS = {"conversion_rate"}
INT_METRICS = {"orders_count", "total_quantity", "record_count"}
MONEY_COLUMNS = {"revenue", "amount", "refund", "fees", "net"}
INT_FMT = "#,##0"
DATE_FMT = "yyyy-mm-dd"


def _currency_format(currency_code: str) -> str:
    code = (currency_code or "USD").upper().strip()
    # Works globally: shows currency code as text prefix.
    return f'"{code} " #,##0.00'


def _style_header_row(ws, header_row: int, max_col: int) -> None:
    for c in range(1, max_col + 1):
        cell = ws.cell(row=header_row, column=c)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = CENTER


def _auto_fit_columns(ws, min_row: int = 1) -> None:
    for col in range(1, ws.max_column + 1):
        max_len = 0
        for row in range(min_row, ws.max_row + 1):
            v = ws.cell(row=row, column=col).value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))

        width = min(max_len + 2, 45)
        ws.column_dimensions[get_column_letter(col)].width = max(10, width)


def _format_summary_sheet(ws, currency_fmt: str) -> None:
    ws.freeze_panes = "A2"
    _style_header_row(ws, header_row=1, max_col=ws.max_column)

    for r in range(2, ws.max_row + 1):
        metric = ws.cell(row=r, column=1).value
        val_cell = ws.cell(row=r, column=2)
        if metric is None or not isinstance(val_cell.value, (int, float)):
            continue
        m = str(metric).lower()

        if m in PERCENT_METRICS:
            # stored as 0-100, shown with a % suffix
            val_cell.number_format = '0.00"%"'
        elif m in INT_METRICS:
            val_cell.number_format = INT_FMT
        else:
            val_cell.number_format = currency_fmt

    _auto_fit_columns(ws)


def _format_table_sheet(ws, currency_fmt: str) -> None:
    ws.freeze_panes = "A2"
    _style_header_row(ws, header_row=1, max_col=ws.max_column)

    for col in range(1, ws.max_column + 1):
        name = str(ws.cell(row=1, column=col).value or "").lower()
        if name == "date":
            fmt = DATE_FMT
        elif name in MONEY_COLUMNS:
            fmt = currency_fmt
        elif name == "quantity":
            fmt = INT_FMT
        else:
            fmt = None

        for r in range(2, ws.max_row + 1):
            cell = ws.cell(row=r, column=col)
            if cell.value is None:
                continue
            if isinstance(cell.value, str):
                cell.alignment = LEFT
            elif fmt:
                cell.number_format = fmt

    _auto_fit_columns(ws)


def _apply_revenue_color_scale(ws, col: int) -> None:
    """Red-to-green scale centred on zero for a revenue column."""
    if ws.max_row < 3:
        return

    rule = ColorScaleRule(
        start_type="min",
        start_color="F8696B",  # red
        mid_type="num",
        mid_value=0,
        mid_color="FFEB84",    # yellow
        end_type="max",
        end_color="63BE7B",    # green
    )
    letter = get_column_letter(col)
    ws.conditional_formatting.add(f"{letter}2:{letter}{ws.max_row}", rule)


def _transactions_frame(transactions: pd.DataFrame) -> pd.DataFrame:
    # the export table carries 2dp strings; the workbook wants numbers
    t = transactions.copy()
    for c in ["Amount", "Refund", "Fees", "Net"]:
        if c in t.columns:
            t[c] = pd.to_numeric(t[c], errors="coerce")
    if "Date" in t.columns:
        t["Date"] = pd.to_datetime(t["Date"], errors="coerce")
    return t


def write_excel_pack(
    out_path: Path,
    summary: pd.DataFrame,
    trends: pd.DataFrame,
    top_products: pd.DataFrame,
    transactions: pd.DataFrame,
    warnings: list[str] | None = None,
    currency_code: str = "USD",
) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    currency_fmt = _currency_format(currency_code)

    trends = trends.copy()
    if "date" in trends.columns:
        trends["date"] = pd.to_datetime(trends["date"], errors="coerce")

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        summary.to_excel(writer, sheet_name="Summary", index=False)
        trends.to_excel(writer, sheet_name="Trends", index=False)
        top_products.to_excel(writer, sheet_name="Top_Products", index=False)
        _transactions_frame(transactions).to_excel(writer, sheet_name="Transactions", index=False)

        _format_summary_sheet(writer.sheets["Summary"], currency_fmt=currency_fmt)
        for name in ["Trends", "Top_Products", "Transactions"]:
            _format_table_sheet(writer.sheets[name], currency_fmt=currency_fmt)

        _apply_revenue_color_scale(writer.sheets["Trends"], col=2)

        ws = writer.book.create_sheet("Warnings")
        ws.cell(row=1, column=1, value="WARNINGS").font = TITLE_FONT
        for i, w in enumerate(warnings or ["(none)"], start=2):
            ws.cell(row=i, column=1, value=w)
        _auto_fit_columns(ws)

        if "Sheet" in writer.book.sheetnames:
            writer.book.remove(writer.book["Sheet"])
