from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from tidyguru.clean import ParseResult, SalesRecord
from tidyguru.detect import detect_columns


@dataclass(frozen=True)
class Session:
    """The record collection currently being analysed. Replaced whole, never edited."""

    records: tuple[SalesRecord, ...] = ()
    columns: tuple[str, ...] = ()
    file_name: str = ""
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def replace(self, result: ParseResult, file_name: str) -> Session:
        return Session(
            records=tuple(result.records),
            columns=tuple(result.columns),
            file_name=file_name,
            warnings=tuple(result.warnings),
        )

    def clear(self) -> Session:
        return Session()

    def as_result(self, extra_keywords=None) -> ParseResult:
        """Rebuild the parse view of a restored session; the mapping is re-detected from its columns."""
        return ParseResult(
            records=list(self.records),
            columns=list(self.columns),
            mapping=detect_columns(self.columns, extra_keywords),
            warnings=list(self.warnings),
        )


def _record_to_dict(r: SalesRecord) -> dict[str, Any]:
    return {
        "date": r.date.isoformat(),
        "product": r.product,
        "amount": r.amount,
        "refund": r.refund,
        "fees": r.fees,
        "quantity": r.quantity,
        "raw_data": r.raw_data,
    }


def _record_from_dict(d: dict[str, Any]) -> SalesRecord:
    return SalesRecord(
        date=date.fromisoformat(d["date"]),
        product=str(d["product"]),
        amount=float(d["amount"]),
        refund=float(d["refund"]),
        fees=float(d["fees"]),
        quantity=int(d.get("quantity", 1)),
        raw_data=dict(d.get("raw_data") or {}),
    )


def save_session(path: Path, session: Session) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "file_name": session.file_name,
        "columns": list(session.columns),
        "warnings": list(session.warnings),
        "records": [_record_to_dict(r) for r in session.records],
    }
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def load_session(path: Path) -> Session:
    if not path.exists():
        return Session()
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Session file must hold a JSON object: {path}")

    try:
        records = tuple(_record_from_dict(d) for d in data.get("records", []))
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Corrupt session file {path}: {e}") from e

    return Session(
        records=records,
        columns=tuple(str(c) for c in data.get("columns", [])),
        file_name=str(data.get("file_name", "")),
        warnings=tuple(str(w) for w in data.get("warnings", [])),
    )
