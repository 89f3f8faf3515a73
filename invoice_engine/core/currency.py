from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, localcontext
from typing import Callable, Iterable, Optional


CURRENCY_SYMBOLS = {
	"INR": "₹",
	"USD": "$",
	"EUR": "€",
	"GBP": "£",
	"JPY": "¥",
}

GROUPING_STYLES = ("western", "indian")

CENT = Decimal("0.01")
MILLI = Decimal("0.001")


def to_decimal(x: object) -> Decimal:
	"""Best-effort conversion to Decimal via str to avoid binary float artifacts."""
	try:
		return Decimal(str(x))
	except (InvalidOperation, ValueError, TypeError):
		return Decimal("0")


def parse_decimal(x: object) -> Decimal:
	"""Strict conversion to a finite Decimal.

	Raises ValueError for booleans, blanks, non-numeric strings and NaN/Infinity.
	"""
	if isinstance(x, bool) or x is None:
		raise ValueError(f"not a number: {x!r}")
	s = str(x).strip()
	if not s:
		raise ValueError("not a number: empty value")
	try:
		d = Decimal(s)
	except InvalidOperation:
		raise ValueError(f"not a number: {x!r}") from None
	if not d.is_finite():
		raise ValueError(f"not a finite number: {x!r}")
	return d


def _quantize_half_up(d: Decimal, exp: Decimal) -> Decimal:
	with localcontext() as ctx:
		# room for every whole digit plus the kept decimals
		ctx.prec = max(ctx.prec, d.adjusted() - exp.as_tuple().exponent + 1)
		return d.quantize(exp, rounding=ROUND_HALF_UP)


def round_money_dec(x: float | Decimal) -> Decimal:
	"""Round to 2 decimals (half-up) for display; keep aggregation unrounded."""
	d = x if isinstance(x, Decimal) else to_decimal(x)
	return _quantize_half_up(d, CENT)


def sum_money(values: Iterable[float | Decimal]) -> Decimal:
	"""Accumulate monetary values in full Decimal precision (no rounding)."""
	total = Decimal("0")
	for v in values:
		total += v if isinstance(v, Decimal) else to_decimal(v)
	return total


def group_digits(digits: str, style: str = "western") -> str:
	"""Insert thousands separators into a string of integer digits.

	'western' groups by three (1,234,567); 'indian' groups the last three digits
	and then by two (12,34,567).
	"""
	if style not in GROUPING_STYLES:
		raise ValueError(f"unknown digit grouping: {style!r}")
	if len(digits) <= 3:
		return digits
	head, tail = digits[:-3], digits[-3:]
	step = 2 if style == "indian" else 3
	groups = []
	while len(head) > step:
		groups.insert(0, head[-step:])
		head = head[:-step]
	if head:
		groups.insert(0, head)
	return ",".join(groups + [tail])


def currency_symbol(code: str) -> str:
	code = (code or "").strip().upper()
	if code in CURRENCY_SYMBOLS:
		return CURRENCY_SYMBOLS[code]
	return code_prefix(code)


def code_prefix(code: str) -> str:
	"""Plain-text prefix for a currency, e.g. 'INR '."""
	code = (code or "").strip().upper()
	return f"{code} " if code else ""


def format_currency(amount: float | Decimal, currency: str = "USD", grouping: str = "western", symbol: Optional[str] = None) -> str:
	"""Format an amount as a currency string, e.g. '$1,234.50' or '₹12,34,567.50'.

	symbol replaces the currency's own prefix, e.g. 'INR ' for fonts without ₹.
	"""
	if symbol is None:
		symbol = currency_symbol(currency)
	d = round_money_dec(amount)
	sign = "-" if d < 0 else ""
	whole, frac = f"{d.copy_abs():.2f}".split(".")
	return f"{sign}{symbol}{group_digits(whole, grouping)}.{frac}"


def currency_formatter(currency: str = "USD", grouping: str = "western", symbol: Optional[str] = None) -> Callable[[Decimal], str]:
	group_digits("0", grouping)  # raises on unknown grouping

	def _fmt(amount: Decimal) -> str:
		return format_currency(amount, currency, grouping, symbol)

	return _fmt


def fmt_qty(qty: float | Decimal) -> str:
	"""Format quantity with up to 3 decimals, no trailing zeros."""
	q = _quantize_half_up(to_decimal(qty), MILLI)
	s = f"{q:f}"
	if "." in s:
		s = s.rstrip("0").rstrip(".")
	return s if s not in ("", "-0") else "0"
