from __future__ import annotations

import argparse
from pathlib import Path
import sys

from tidyguru.clean import parse_csv_file
from tidyguru.config import date_range_warning, resolve_config, resolve_date_range
from tidyguru.ingest import CsvParseError
from tidyguru.kpis import PRESETS, build_tables, compute_metrics, compute_top_products, filter_by_date_range
from tidyguru.export import default_export_name, export_frame, write_export_csv
from tidyguru.export_excel import write_excel_pack
from tidyguru.charts import generate_charts
from tidyguru.pdf_report import write_pdf_report
from tidyguru.quality import build_quality_report, write_quality_excel
from tidyguru.runlog import write_run_log
from tidyguru.session import Session, load_session, save_session
from tidyguru.table import table_preview


SAMPLE_ROWS = [
    "2025-01-15,Premium Analytics Dashboard,99.00,0,2.97",
    "2025-01-15,Starter Plan,29.00,0,0.87",
    "2025-01-16,Premium Analytics Dashboard,99.00,0,2.97",
    "2025-01-16,Pro Plan,49.00,0,1.47",
    "2025-01-17,Enterprise Plan,199.00,0,5.97",
    "2025-01-17,Premium Analytics Dashboard,99.00,0,2.97",
    "2025-01-18,Starter Plan,29.00,29.00,0.87",
    "2025-01-18,Pro Plan,49.00,0,1.47",
    "2025-01-19,Premium Analytics Dashboard,99.00,0,2.97",
    "2025-01-19,Premium Analytics Dashboard,99.00,0,2.97",
    "2025-01-20,Enterprise Plan,199.00,0,5.97",
    "2025-01-20,Pro Plan,49.00,0,1.47",
    "2025-01-21,Starter Plan,29.00,0,0.87",
    "2025-01-21,Premium Analytics Dashboard,99.00,0,2.97",
    "2025-01-22,Pro Plan,49.00,0,1.47",
    "2025-01-22,Premium Analytics Dashboard,99.00,0,2.97",
    "2025-01-23,Enterprise Plan,199.00,0,5.97",
    "2025-01-23,Premium Analytics Dashboard,99.00,0,2.97",
    "2025-01-24,Starter Plan,29.00,0,0.87",
    "2025-01-24,Pro Plan,49.00,0,1.47",
]


def make_demo_input(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(["Date,Product,Amount,Refund,Fees", *SAMPLE_ROWS]) + "\n", encoding="utf-8")


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="TidyGuru sales analytics for platform CSV exports")

    # Default config.yaml so `python main.py` just works
    p.add_argument("--config", type=str, default="config.yaml", help="Path to config.yaml (default: config.yaml)")
    p.add_argument("--input", type=str, default=None, help="Override input_file from config")
    p.add_argument("--out", type=str, default=None, help="Override out_dir from config")
    p.add_argument("--currency", type=str, default=None, help="Override currency_code from config (e.g. USD/EUR)")

    p.add_argument("--preset", choices=PRESETS, default=None, help="Date preset: this week, last 30 days, or all time")
    p.add_argument("--from", dest="date_from", default=None, help="Start date (yyyy-mm-dd), inclusive")
    p.add_argument("--to", dest="date_to", default=None, help="End date (yyyy-mm-dd), inclusive")
    p.add_argument("--search", type=str, default=None, help="Print the table rows containing this text")

    src = p.add_mutually_exclusive_group()
    src.add_argument("--demo", action="store_true", help="Write the sample CSV to the input path then run")
    src.add_argument("--resume", action="store_true", help="Reuse the rows saved in <out>/session.json instead of reading the input")

    # Optional override for PDF only (config controls defaults)
    g = p.add_mutually_exclusive_group()
    g.add_argument("--pdf", action="store_true", help="Force PDF on (override config)")
    g.add_argument("--no-pdf", action="store_true", help="Force PDF off (override config)")

    return p.parse_args(argv)


def main(argv: list[str]) -> int:
    args = parse_args(argv)

    try:
        cfg = resolve_config(
            config_path=args.config,
            cli_input=args.input,
            cli_out=args.out,
            cli_currency=args.currency,
            cli_preset=args.preset,
            cli_from=args.date_from,
            cli_to=args.date_to,
        )
    except Exception as e:
        print(f"ERROR loading config: {e}", file=sys.stderr)
        return 2

    # CLI override for PDF
    make_pdf = cfg.make_pdf
    if args.pdf:
        make_pdf = True
    if args.no_pdf:
        make_pdf = False

    input_file = cfg.input_file
    out_dir = cfg.out_dir
    out_dir.mkdir(parents=True, exist_ok=True)

    session_path = out_dir / "session.json"

    if args.demo:
        make_demo_input(input_file)

    if args.resume:
        try:
            session = load_session(session_path)
        except ValueError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 2
        if session.is_empty:
            print(f"ERROR: No saved session in {session_path}", file=sys.stderr)
            return 2
        result = session.as_result(extra_keywords=cfg.extra_keywords)
        print(f"♻️  Restored {len(result.records)} rows from {session.file_name or session_path}")
    else:
        try:
            result = parse_csv_file(input_file, extra_keywords=cfg.extra_keywords)
        except FileNotFoundError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 2
        except CsvParseError as e:
            print(f"ERROR: Can't parse {input_file}: {e}", file=sys.stderr)
            return 2

        session = Session().replace(result, file_name=input_file.name)
        print(f"✅ Parsed {len(result.records)} rows from {input_file.name}")

    for field_name, col in result.mapping.as_dict().items():
        print(f"   {field_name:<9} <- {col if col is not None else '(not detected)'}")
    for w in result.warnings:
        print(f"⚠️  {w}")

    range_warning = date_range_warning(cfg)
    if range_warning:
        print(f"⚠️  {range_warning}")

    date_range = resolve_date_range(cfg)
    records = filter_by_date_range(session.records, date_range)
    metrics = compute_metrics(records)
    top = compute_top_products(records, top_n=cfg.top_n)
    tables = build_tables(records, top_n=cfg.top_n)

    sym = cfg.currency_symbol
    print(f"📅 Date range: {date_range.label()} ({len(records)} of {len(session.records)} rows)")
    print(f"   Gross sales:   {sym}{metrics.gross_sales:,.2f}")
    print(f"   Refunds:       {sym}{metrics.total_refunds:,.2f}")
    print(f"   Net revenue:   {sym}{metrics.net_revenue:,.2f}")
    print(f"   Orders:        {metrics.orders_count}")
    print(f"   Avg order:     {sym}{metrics.avg_order_value:,.2f}")
    print(f"   Best product:  {metrics.best_product or 'N/A'}")

    if args.search is not None:
        preview = table_preview(records, list(session.columns), query=args.search)
        print(f"🔎 {preview.caption()}")
        print(" | ".join(preview.columns))
        for row in preview.rows:
            print(" | ".join(str(v) for v in row))

    if cfg.write_session:
        save_session(session_path, session)
        print(f"💾 Session saved: {session_path}")

    if cfg.write_export_csv:
        csv_path = out_dir / default_export_name()
        try:
            n = write_export_csv(records, csv_path)
        except PermissionError:
            print(f"ERROR: Can't write {csv_path}. Close it if open, then re-run.", file=sys.stderr)
        else:
            print(f"🧼 Exported {n} rows to CSV: {csv_path}")

    if cfg.write_quality_report:
        dq_path = out_dir / "data_quality.xlsx"
        try:
            write_quality_excel(dq_path, build_quality_report(result))
        except PermissionError:
            print(f"ERROR: Can't write {dq_path}. Close it if open in Excel, then re-run.", file=sys.stderr)
        else:
            print(f"✅ Data quality report created: {dq_path}")

    if cfg.write_excel_pack:
        xlsx_path = out_dir / "report_pack.xlsx"
        try:
            write_excel_pack(
                out_path=xlsx_path,
                summary=tables["Summary"],
                trends=tables["Trends"],
                top_products=tables["Top_Products"],
                transactions=export_frame(records),
                warnings=result.warnings,
                currency_code=cfg.currency_code,
            )
        except PermissionError:
            print(f"ERROR: Can't write {xlsx_path}. Close it if open in Excel, then re-run.", file=sys.stderr)
        else:
            print(f"📦 Excel pack created: {xlsx_path}")

    # Charts (generate if either charts are requested OR PDF needs them)
    created: list[Path] = []
    if cfg.write_charts or make_pdf:
        created = generate_charts(
            trends=tables["Trends"],
            top_products=tables["Top_Products"],
            out_dir=out_dir / "charts",
            currency_code=cfg.currency_code,
        )
        if created:
            print("📊 Charts saved:")
            for p in created:
                print(" -", p)
        else:
            print("📊 No charts generated (not enough data in range).")

    pdf_created = False
    if make_pdf:
        pdf_path = out_dir / "report.pdf"
        if not records:
            print("📄 PDF skipped: no rows in the selected date range.")
        else:
            try:
                write_pdf_report(
                    out_path=pdf_path,
                    records=records,
                    metrics=metrics,
                    top_products=top,
                    chart_paths=created,
                    source_label=session.file_name,
                    currency_symbol=sym,
                    report_title=cfg.report_title,
                    report_subtitle=cfg.report_subtitle,
                    range_label=date_range.label(),
                    notes=cfg.notes,
                    warnings=result.warnings,
                )
            except PermissionError:
                print(f"ERROR: Can't write {pdf_path}. Close it if open, then re-run.", file=sys.stderr)
            else:
                pdf_created = True
                print(f"📄 PDF report created: {pdf_path}")

    if cfg.write_run_log:
        log_path = out_dir / "run_log.txt"
        write_run_log(
            log_path,
            input_file=str(input_file),
            out_dir=str(out_dir),
            currency=cfg.currency_code,
            rows_parsed=len(result.records),
            mapping=result.mapping.as_dict(),
            range_label=date_range.label(),
            rows_in_range=len(records),
            charts_count=len(created),
            pdf_created=pdf_created,
            warnings=result.warnings,
        )
        print(f"🧾 Run log written: {log_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
