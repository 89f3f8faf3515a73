from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, TYPE_CHECKING

from invoice_engine.core.currency import sum_money

if TYPE_CHECKING:
	from invoice_engine.data.models import LineItem


HUNDRED = Decimal("100")


@dataclass(frozen=True)
class InvoiceTotals:
	"""Full-precision totals; round with round_money_dec only when displaying."""

	subtotal: Decimal
	tax_total: Decimal
	grand_total: Decimal


def line_amount(item: "LineItem") -> Decimal:
	return item.quantity * item.rate


def line_tax(item: "LineItem") -> Decimal:
	return item.quantity * item.rate * item.tax_rate / HUNDRED


def calculate_totals(items: Iterable["LineItem"], precomputed_total: Optional[Decimal] = None) -> InvoiceTotals:
	"""Derive subtotal, tax and grand total from line items.

	A precomputed total from upstream replaces subtotal + tax as the grand total;
	subtotal and tax are still reported as calculated.
	"""
	items = list(items)
	subtotal = sum_money(line_amount(i) for i in items)
	tax_total = sum_money(line_tax(i) for i in items)
	grand_total = precomputed_total if precomputed_total is not None else subtotal + tax_total
	return InvoiceTotals(subtotal=subtotal, tax_total=tax_total, grand_total=grand_total)
