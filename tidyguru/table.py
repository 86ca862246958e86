from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from tidyguru.clean import SalesRecord


PREVIEW_LIMIT = 100


@dataclass(frozen=True)
class TablePreview:
    columns: list[str]
    rows: list[list[Any]]
    total_matches: int

    @property
    def truncated(self) -> bool:
        return self.total_matches > len(self.rows)

    def caption(self) -> str:
        if self.truncated:
            return f"Showing first {len(self.rows)} of {self.total_matches} rows"
        return f"{self.total_matches} rows"


def search_records(records: Iterable[SalesRecord], query: str | None) -> list[SalesRecord]:
    q = (query or "").lower()
    if not q:
        return list(records)
    return [r for r in records if any(q in str(v).lower() for v in r.raw_data.values())]


def table_preview(
    records: Iterable[SalesRecord],
    columns: list[str],
    query: str | None = None,
    limit: int = PREVIEW_LIMIT,
) -> TablePreview:
    matches = search_records(records, query)
    rows = [[r.raw_data.get(c, "") for c in columns] for r in matches[:limit]]
    return TablePreview(columns=list(columns), rows=rows, total_matches=len(matches))
