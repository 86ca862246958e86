from __future__ import annotations

from datetime import date

import pytest

from tidyguru.clean import SalesRecord


SAMPLE_CSV = """Date,Product,Amount,Refund,Fees
2025-01-15,Premium Analytics Dashboard,99.00,0,2.97
2025-01-15,Starter Plan,29.00,0,0.87
2025-01-16,Premium Analytics Dashboard,99.00,0,2.97
2025-01-16,Pro Plan,49.00,0,1.47
2025-01-17,Enterprise Plan,199.00,0,5.97
2025-01-17,Premium Analytics Dashboard,99.00,0,2.97
2025-01-18,Starter Plan,29.00,29.00,0.87
2025-01-18,Pro Plan,49.00,0,1.47
2025-01-19,Premium Analytics Dashboard,99.00,0,2.97
2025-01-19,Premium Analytics Dashboard,99.00,0,2.97
2025-01-20,Enterprise Plan,199.00,0,5.97
2025-01-20,Pro Plan,49.00,0,1.47
2025-01-21,Starter Plan,29.00,0,0.87
2025-01-21,Premium Analytics Dashboard,99.00,0,2.97
2025-01-22,Pro Plan,49.00,0,1.47
2025-01-22,Premium Analytics Dashboard,99.00,0,2.97
2025-01-23,Enterprise Plan,199.00,0,5.97
2025-01-23,Premium Analytics Dashboard,99.00,0,2.97
2025-01-24,Starter Plan,29.00,0,0.87
2025-01-24,Pro Plan,49.00,0,1.47
"""

TODAY = date(2025, 2, 1)


def make_record(
    d: date,
    product: str = "Widget",
    amount: float = 0.0,
    refund: float = 0.0,
    fees: float = 0.0,
    quantity: int | None = None,
) -> SalesRecord:
    if quantity is None:
        quantity = 1 if amount > 0 else 0
    return SalesRecord(
        date=d,
        product=product,
        amount=amount,
        refund=refund,
        fees=fees,
        quantity=quantity,
        raw_data={"Date": d.isoformat(), "Product": product, "Amount": f"{amount:.2f}"},
    )


@pytest.fixture
def sample_bytes() -> bytes:
    return SAMPLE_CSV.encode("utf-8")


@pytest.fixture
def sample_records(sample_bytes):
    from tidyguru.clean import parse_csv

    return parse_csv(sample_bytes, today=TODAY).records
