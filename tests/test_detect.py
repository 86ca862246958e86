from __future__ import annotations

import pytest

from tidyguru.detect import ColumnMapping, detect_columns


def test_shopify_style_headers():
    m = detect_columns(
        ["Order", "Created at", "Lineitem name", "Total", "Refunded Amount", "Processing Fee", "Lineitem quantity"]
    )
    assert m == ColumnMapping(
        date_column="Created at",
        product_column="Lineitem name",
        amount_column="Total",
        refund_column="Refunded Amount",
        fees_column="Processing Fee",
        quantity_column="Lineitem quantity",
    )


def test_matching_is_case_insensitive_and_preserves_header_text():
    m = detect_columns(["SALE DATE", "PRODUCT TITLE", "GROSS AMOUNT"])
    assert m.date_column == "SALE DATE"
    assert m.product_column == "PRODUCT TITLE"
    assert m.amount_column == "GROSS AMOUNT"


def test_first_matching_header_in_file_order_wins():
    m = detect_columns(["Price", "Total", "Amount"])
    assert m.amount_column == "Price"


def test_unmatched_fields_are_left_unmapped():
    m = detect_columns(["Date", "Amount"])
    assert m.product_column is None
    assert m.refund_column is None
    assert m.fees_column is None
    assert m.quantity_column is None


def test_one_header_can_serve_two_fields():
    m = detect_columns(["Date", "Product", "Refund Total"])
    assert m.amount_column == "Refund Total"
    assert m.refund_column == "Refund Total"
    assert m.shared_columns() == {"Refund Total": ["amount", "refund"]}


def test_as_dict_lists_every_field():
    m = detect_columns(["Date"])
    assert m.as_dict() == {
        "date": "Date",
        "product": None,
        "amount": None,
        "refund": None,
        "fees": None,
        "quantity": None,
    }
    assert m.column_for("date") == "Date"


def test_extra_keywords_are_tried_after_builtins():
    m = detect_columns(["Day", "SKU", "Revenue"], extra_keywords={"product": ["sku"], "amount": ["Revenue"]})
    assert m.product_column == "SKU"
    assert m.amount_column == "Revenue"
    assert m.date_column is None


def test_unknown_extra_keyword_field():
    with pytest.raises(ValueError, match="Unknown field"):
        detect_columns(["Date"], extra_keywords={"colour": ["x"]})


def test_detection_is_pure():
    headers = ["Date", "Item", "Price"]
    assert detect_columns(headers) == detect_columns(headers)
    assert headers == ["Date", "Item", "Price"]
