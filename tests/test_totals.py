from __future__ import annotations

from decimal import Decimal

from invoice_engine.core.currency import round_money_dec
from invoice_engine.core.totals import calculate_totals, line_amount, line_tax
from invoice_engine.data.models import LineItem


def _item(desc: str, qty: str, rate: str, tax: str = "0") -> LineItem:
    return LineItem(desc, Decimal(qty), Decimal(rate), Decimal(tax))


ITEMS = [_item("A", "2", "100", "10"), _item("B", "1", "50", "0")]


def test_totals_for_reference_items() -> None:
    totals = calculate_totals(ITEMS)
    assert totals.subtotal == Decimal("250")
    assert totals.tax_total == Decimal("20")
    assert totals.grand_total == Decimal("270")


def test_precomputed_total_wins() -> None:
    totals = calculate_totals(ITEMS, Decimal("300"))
    assert totals.grand_total == Decimal("300")
    # subtotal and tax are still the calculated values
    assert totals.subtotal == Decimal("250")
    assert totals.tax_total == Decimal("20")


def test_precomputed_zero_is_still_used() -> None:
    assert calculate_totals(ITEMS, Decimal("0")).grand_total == Decimal("0")


def test_zero_items() -> None:
    totals = calculate_totals([])
    assert totals.subtotal == 0
    assert totals.tax_total == 0
    assert totals.grand_total == 0


def test_subtotal_is_sum_of_unrounded_amounts_in_any_order() -> None:
    items = [
        _item("x", "3", "0.333", "5"),
        _item("y", "1.5", "19.99", "18"),
        _item("z", "7", "0.005", "12.5"),
    ]
    expected = sum((line_amount(i) for i in items), Decimal("0"))
    assert calculate_totals(items).subtotal == expected
    assert calculate_totals(list(reversed(items))).subtotal == expected
    assert calculate_totals(items[1:] + items[:1]).subtotal == expected


def test_rounding_happens_after_aggregation() -> None:
    items = [_item("a", "1", "0.005"), _item("b", "1", "0.005")]
    totals = calculate_totals(items)
    assert totals.subtotal == Decimal("0.010")
    assert round_money_dec(totals.subtotal) == Decimal("0.01")
    # rounding each line first would have produced 0.02
    assert sum(round_money_dec(line_amount(i)) for i in items) == Decimal("0.02")


def test_line_tax_uses_percentage() -> None:
    assert line_tax(_item("t", "2", "100", "10")) == Decimal("20")
    assert line_tax(_item("t", "1", "99.99", "0")) == Decimal("0")
