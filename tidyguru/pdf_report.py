from __future__ import annotations

from pathlib import Path
from datetime import datetime
from typing import Sequence
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.lib import colors
from reportlab.platypus import (
    SimpleDocTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
    Image,
    PageBreak,
    KeepTogether,
)
from reportlab.lib.styles import getSampleStyleSheet

from tidyguru.clean import SalesRecord
from tidyguru.kpis import AggregateMetrics, ProductRevenue


PRIMARY = colors.HexColor("#4F46E5")
ROW_ALT = colors.HexColor("#F1F5F9")
GRID = colors.HexColor("#E2E8F0")
FOOTER_GREY = colors.HexColor("#64748B")


def _fmt_money(x: float, symbol: str) -> str:
    sign = "-" if x < 0 else ""
    return f"{sign}{symbol}{abs(x):,.2f}"


def _truncate(s: str, n: int) -> str:
    return s if len(s) <= n else s[:n] + "..."


def _table_style(header_bg=colors.lightgrey, font_size: int = 9) -> TableStyle:
    return TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), header_bg),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("GRID", (0, 0), (-1, -1), 0.25, GRID),
            ("FONTSIZE", (0, 0), (-1, -1), font_size),
            ("PADDING", (0, 0), (-1, -1), 4),
        ]
    )


def _kpi_rows(metrics: AggregateMetrics, symbol: str) -> list[list[str]]:
    best = metrics.best_product or "N/A"
    if metrics.best_product:
        best = f"{_truncate(best, 40)} ({_fmt_money(metrics.best_product_revenue, symbol)})"
    return [
        ["Metric", "Value"],
        ["Gross Sales", _fmt_money(metrics.gross_sales, symbol)],
        ["Net Revenue", _fmt_money(metrics.net_revenue, symbol)],
        ["Total Orders", f"{metrics.orders_count:,}"],
        ["Avg Order", _fmt_money(metrics.avg_order_value, symbol)],
        ["Refunds", _fmt_money(metrics.total_refunds, symbol)],
        ["Fees", _fmt_money(metrics.total_fees, symbol)],
        ["Quantity Sold", f"{metrics.total_quantity:,}"],
        ["Best Product", best],
        ["Conversion Rate", f"{metrics.conversion_rate:.2f}%"],
    ]


def _draw_footer(canvas, doc) -> None:
    canvas.saveState()
    w, _ = A4
    y = 1.0 * cm
    canvas.setStrokeColor(GRID)
    canvas.setLineWidth(0.3)
    canvas.line(doc.leftMargin, y + 0.4 * cm, w - doc.rightMargin, y + 0.4 * cm)
    canvas.setFont("Helvetica", 7)
    canvas.setFillColor(FOOTER_GREY)
    canvas.drawString(doc.leftMargin, y, "Generated by TidyGuru")
    canvas.drawRightString(w - doc.rightMargin, y, f"Page {doc.page}")
    canvas.restoreState()


def write_pdf_report(
    out_path: Path,
    records: Sequence[SalesRecord],
    metrics: AggregateMetrics,
    top_products: Sequence[ProductRevenue],
    chart_paths: list[Path],
    source_label: str,
    currency_symbol: str = "$",
    report_title: str = "TidyGuru Sales Analytics Report",
    report_subtitle: str = "",
    range_label: str = "",
    notes: list[str] | None = None,
    warnings: list[str] | None = None,
) -> None:
    if not records:
        raise ValueError("No data to export")

    out_path.parent.mkdir(parents=True, exist_ok=True)

    styles = getSampleStyleSheet()
    story = []

    # ---- Title block ----
    story.append(Paragraph(escape(report_title or "TidyGuru Sales Analytics Report"), styles["Title"]))
    if report_subtitle:
        story.append(Spacer(1, 0.15 * cm))
        story.append(Paragraph(escape(report_subtitle), styles["Heading2"]))

    story.append(Spacer(1, 0.25 * cm))
    story.append(Paragraph(f"Source: <b>{escape(_truncate(source_label, 30))}</b>", styles["Normal"]))
    if range_label:
        story.append(Paragraph(f"Date range: <b>{escape(range_label)}</b>", styles["Normal"]))
    story.append(Paragraph(f"Generated: {datetime.now().strftime('%b %d, %Y %H:%M')}", styles["Normal"]))
    story.append(Spacer(1, 0.35 * cm))

    if warnings:
        story.append(Paragraph("Warnings", styles["Heading2"]))
        for w in warnings[:10]:
            story.append(Paragraph(f"• {escape(w)}", styles["Normal"]))
        if len(warnings) > 10:
            story.append(Paragraph(f"(+ {len(warnings) - 10} more)", styles["Normal"]))
        story.append(Spacer(1, 0.25 * cm))

    # ---- KPI block ----
    story.append(Paragraph("Key Metrics", styles["Heading2"]))
    kpi_tbl = Table(_kpi_rows(metrics, currency_symbol), colWidths=[6 * cm, 10 * cm])
    kpi_tbl.setStyle(_table_style(font_size=10))
    story.append(kpi_tbl)
    story.append(Spacer(1, 0.25 * cm))

    # ---- Top products ----
    if top_products:
        story.append(Paragraph(f"Top {len(top_products)} Products", styles["Heading2"]))
        rows = [["Product", "Net Revenue"]] + [
            [_truncate(p.product, 40), _fmt_money(p.revenue, currency_symbol)] for p in top_products
        ]
        tp_tbl = Table(rows, colWidths=[10 * cm, 6 * cm])
        tp_tbl.setStyle(_table_style())
        story.append(tp_tbl)

    # ---- Commentary from config.yaml ----
    clean_notes = [str(x).strip() for x in (notes or []) if str(x).strip()]
    if clean_notes:
        story.append(Spacer(1, 0.2 * cm))
        story.append(Paragraph("Commentary", styles["Heading2"]))
        for n in clean_notes[:8]:
            story.append(Paragraph(f"• {escape(n)}", styles["Normal"]))
        if len(clean_notes) > 8:
            story.append(Paragraph(f"(+ {len(clean_notes) - 8} more)", styles["Normal"]))

    # ---- Charts (both on one page) ----
    chart_paths = [Path(p) for p in chart_paths if Path(p).exists()]
    if chart_paths:
        story.append(PageBreak())
        story.append(Paragraph("Charts", styles["Heading2"]))
        story.append(Spacer(1, 0.2 * cm))

        page_w, page_h = A4
        max_w = page_w - 2 * 1.7 * cm
        max_h_each = (page_h - 2 * 1.7 * cm - 4.5 * cm) / 2

        for p in chart_paths[:2]:
            img = Image(str(p))
            img.hAlign = "CENTER"
            img._restrictSize(max_w, max_h_each)
            story.append(KeepTogether([img, Spacer(1, 0.35 * cm)]))

    # ---- Transaction details ----
    story.append(PageBreak())
    story.append(Paragraph("Transaction Details", styles["Heading2"]))
    table_data = [["Date", "Product", "Amount", "Refund", "Fees", "Net"]]
    for r in records:
        table_data.append(
            [
                r.date.strftime("%b %d, %Y"),
                r.product[:30],
                _fmt_money(r.amount, currency_symbol),
                _fmt_money(r.refund, currency_symbol),
                _fmt_money(r.fees, currency_symbol),
                _fmt_money(r.net, currency_symbol),
            ]
        )

    tbl = Table(table_data, repeatRows=1, colWidths=[2.8 * cm, 6.2 * cm, 2.2 * cm, 2 * cm, 2 * cm, 2.2 * cm])
    style = _table_style(header_bg=PRIMARY, font_size=8)
    style.add("TEXTCOLOR", (0, 0), (-1, 0), colors.white)
    style.add("ALIGN", (2, 0), (-1, -1), "RIGHT")
    style.add("FONTNAME", (5, 1), (5, -1), "Helvetica-Bold")
    style.add("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, ROW_ALT])
    tbl.setStyle(style)
    story.append(tbl)

    doc = SimpleDocTemplate(
        str(out_path),
        pagesize=A4,
        leftMargin=1.7 * cm,
        rightMargin=1.7 * cm,
        topMargin=1.7 * cm,
        bottomMargin=1.7 * cm,
        title=report_title or "TidyGuru Sales Analytics Report",
    )
    doc.build(story, onFirstPage=_draw_footer, onLaterPages=_draw_footer)
