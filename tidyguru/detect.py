from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterable, Mapping


# Evaluated in order; each field takes the first header containing any keyword.
FIELD_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("date", ("date", "time", "created")),
    ("product", ("product", "item", "name", "title")),
    ("amount", ("amount", "price", "total", "gross")),
    ("refund", ("refund", "return")),
    ("fees", ("fee", "charge", "commission")),
    ("quantity", ("quantity", "qty", "units", "count")),
)

FIELDS = tuple(name for name, _ in FIELD_KEYWORDS)


@dataclass(frozen=True)
class ColumnMapping:
    date_column: str | None = None
    product_column: str | None = None
    amount_column: str | None = None
    refund_column: str | None = None
    fees_column: str | None = None
    quantity_column: str | None = None

    def column_for(self, field_name: str) -> str | None:
        return getattr(self, f"{field_name}_column")

    def as_dict(self) -> dict[str, str | None]:
        return {f.name[: -len("_column")]: getattr(self, f.name) for f in fields(self)}

    def shared_columns(self) -> dict[str, list[str]]:
        """Headers that were picked for more than one logical field."""
        by_col: dict[str, list[str]] = {}
        for field_name, col in self.as_dict().items():
            if col is not None:
                by_col.setdefault(col, []).append(field_name)
        return {col: names for col, names in by_col.items() if len(names) > 1}


def keyword_table(extra: Mapping[str, Iterable[str]] | None = None) -> tuple[tuple[str, tuple[str, ...]], ...]:
    if not extra:
        return FIELD_KEYWORDS

    unknown = sorted(set(extra) - set(FIELDS))
    if unknown:
        raise ValueError(f"Unknown field(s) in extra keywords: {', '.join(unknown)}")

    out = []
    for name, words in FIELD_KEYWORDS:
        added = tuple(str(w).strip().lower() for w in extra.get(name, ()) if str(w).strip())
        out.append((name, words + tuple(w for w in added if w not in words)))
    return tuple(out)


def _first_match(lowered: list[str], keywords: tuple[str, ...]) -> int | None:
    for i, h in enumerate(lowered):
        if any(k in h for k in keywords):
            return i
    return None


def detect_columns(
    headers: Iterable[str],
    extra_keywords: Mapping[str, Iterable[str]] | None = None,
) -> ColumnMapping:
    headers = list(headers)
    lowered = [str(h).lower() for h in headers]

    found: dict[str, str | None] = {}
    for name, keywords in keyword_table(extra_keywords):
        idx = _first_match(lowered, keywords)
        # fields resolve independently, so one header may serve two roles
        found[f"{name}_column"] = headers[idx] if idx is not None else None

    return ColumnMapping(**found)
