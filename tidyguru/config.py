from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from tidyguru.detect import FIELDS
from tidyguru.kpis import PRESETS, DateRange, preset_range


@dataclass(frozen=True)
class AppConfig:
    input_file: Path = Path("data/in/sales.csv")
    out_dir: Path = Path("out")
    currency_code: str = "USD"
    currency_symbol: str = "$"
    extra_keywords: dict[str, list[str]] = field(default_factory=dict)

    # Date filter
    date_preset: str = "all"
    date_from: date | None = None
    date_to: date | None = None
    week_starts_on: int = 0
    top_n: int = 5

    # Report text
    report_title: str = "TidyGuru Sales Analytics Report"
    report_subtitle: str = ""
    notes: list[str] = field(default_factory=list)

    # Run toggles
    make_pdf: bool = True
    write_excel_pack: bool = True
    write_charts: bool = True
    write_export_csv: bool = True
    write_quality_report: bool = True
    write_run_log: bool = True
    write_session: bool = True


def load_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError("Config must be a YAML mapping (key: value)")
    return data


def _as_bool(x: Any, default: bool) -> bool:
    if x is None:
        return default
    if isinstance(x, bool):
        return x
    if isinstance(x, (int, float)):
        return bool(x)
    s = str(x).strip().lower()
    if s in {"true", "yes", "y", "1", "on"}:
        return True
    if s in {"false", "no", "n", "0", "off"}:
        return False
    return default


def _parse_notes(raw_notes: Any) -> list[str]:
    if raw_notes is None:
        return []
    if isinstance(raw_notes, str):
        s = raw_notes.strip()
        return [s] if s else []
    if isinstance(raw_notes, list):
        out: list[str] = []
        for x in raw_notes:
            if x is None:
                continue
            s = str(x).strip()
            if s:
                out.append(s)
        return out
    raise ValueError("config.yaml notes must be a string or a list of strings")


def parse_iso_date(x: Any, key: str) -> date | None:
    if x is None or x == "":
        return None
    # YAML already turns unquoted 2025-01-31 into a date
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    try:
        return date.fromisoformat(str(x).strip())
    except ValueError as e:
        raise ValueError(f"{key} must be an ISO date (yyyy-mm-dd), got {x!r}") from e


def _parse_keywords(raw: Any) -> dict[str, list[str]]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("config.yaml extra_keywords must be a mapping of field -> list of keywords")

    out: dict[str, list[str]] = {}
    for k, v in raw.items():
        name = str(k).strip().lower()
        if name not in FIELDS:
            raise ValueError(f"extra_keywords: unknown field '{k}' (expected one of {', '.join(FIELDS)})")
        words = [v] if isinstance(v, str) else list(v or [])
        out[name] = [str(w).strip().lower() for w in words if str(w).strip()]
    return out


def _parse_preset(x: Any) -> str:
    preset = str(x or "all").strip().lower()
    if preset not in PRESETS:
        raise ValueError(f"date_preset must be one of {', '.join(PRESETS)}, got {x!r}")
    return preset


def _parse_int(x: Any, key: str, default: int, lo: int, hi: int | None = None) -> int:
    if x is None:
        return default
    try:
        v = int(x)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{key} must be an integer, got {x!r}") from e
    if v < lo or (hi is not None and v > hi):
        raise ValueError(f"{key} out of range: {v}")
    return v


def resolve_config(
    *,
    config_path: str | None,
    cli_input: str | None = None,
    cli_out: str | None = None,
    cli_currency: str | None = None,
    cli_preset: str | None = None,
    cli_from: str | None = None,
    cli_to: str | None = None,
) -> AppConfig:
    # If user doesn't provide a path, we default to config.yaml at project root
    path = Path(config_path or "config.yaml")
    raw = load_config(path)

    notes = _parse_notes(raw.get("notes"))
    report_title = str(raw.get("report_title", AppConfig.report_title)).strip() or AppConfig.report_title

    input_file = Path(cli_input) if cli_input else Path(raw.get("input_file", AppConfig.input_file))
    out_dir = Path(cli_out) if cli_out else Path(raw.get("out_dir", AppConfig.out_dir))
    currency_code = (cli_currency or str(raw.get("currency_code", "USD"))).upper().strip()

    # CLI overrides config (optional)
    date_preset = _parse_preset(cli_preset or raw.get("date_preset"))
    date_from = parse_iso_date(cli_from, "--from") if cli_from else parse_iso_date(raw.get("date_from"), "date_from")
    date_to = parse_iso_date(cli_to, "--to") if cli_to else parse_iso_date(raw.get("date_to"), "date_to")
    if date_from and date_to and date_from > date_to:
        raise ValueError(f"date_from {date_from} is after date_to {date_to}")

    return AppConfig(
        input_file=input_file,
        out_dir=out_dir,
        currency_code=currency_code,
        currency_symbol=str(raw.get("currency_symbol", "$")),
        extra_keywords=_parse_keywords(raw.get("extra_keywords")),
        date_preset=date_preset,
        date_from=date_from,
        date_to=date_to,
        week_starts_on=_parse_int(raw.get("week_starts_on"), "week_starts_on", 0, 0, 6),
        top_n=_parse_int(raw.get("top_n"), "top_n", 5, 1),
        report_title=report_title,
        report_subtitle=str(raw.get("report_subtitle", "")).strip(),
        notes=notes,
        make_pdf=_as_bool(raw.get("make_pdf"), True),
        write_excel_pack=_as_bool(raw.get("write_excel_pack"), True),
        write_charts=_as_bool(raw.get("write_charts"), True),
        write_export_csv=_as_bool(raw.get("write_export_csv"), True),
        write_quality_report=_as_bool(raw.get("write_quality_report"), True),
        write_run_log=_as_bool(raw.get("write_run_log"), True),
        write_session=_as_bool(raw.get("write_session"), True),
    )


def resolve_date_range(cfg: AppConfig, today: date | None = None) -> DateRange:
    # Explicit dates win over the preset
    if cfg.date_from or cfg.date_to:
        return DateRange(start=cfg.date_from, end=cfg.date_to)
    return preset_range(cfg.date_preset, today=today, week_starts_on=cfg.week_starts_on)


def date_range_warning(cfg: AppConfig) -> str | None:
    if cfg.date_to and not cfg.date_from:
        return (
            f"date_to {cfg.date_to} without date_from does not filter; "
            f"date_preset '{cfg.date_preset}' is ignored and all rows are used"
        )
    return None
