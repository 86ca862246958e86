from __future__ import annotations

from pathlib import Path
from datetime import datetime


def write_run_log(
    out_path: Path,
    *,
    input_file: str,
    out_dir: str,
    currency: str,
    rows_parsed: int,
    mapping: dict[str, str | None],
    range_label: str,
    rows_in_range: int,
    charts_count: int,
    pdf_created: bool,
    warnings: list[str] | None,
) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append("TidyGuru Sales Analytics - Run Log")
    lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append("")
    lines.append(f"Input file: {input_file}")
    lines.append(f"Output dir: {out_dir}")
    lines.append(f"Currency: {currency}")
    lines.append(f"Rows parsed: {rows_parsed}")
    lines.append(f"Date range: {range_label}")
    lines.append(f"Rows in range: {rows_in_range}")
    lines.append(f"Charts generated: {charts_count}")
    lines.append(f"PDF created: {pdf_created}")
    lines.append("")
    lines.append("Detected columns:")
    for field_name, col in mapping.items():
        lines.append(f"- {field_name}: {col if col is not None else '(not detected)'}")
    lines.append("")
    lines.append("Warnings:")
    if warnings:
        for w in warnings:
            lines.append(f"- {w}")
    else:
        lines.append("- (none)")

    out_path.write_text("\n".join(lines), encoding="utf-8")
