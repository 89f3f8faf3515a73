from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Tuple

from invoice_engine.core.currency import parse_decimal
from invoice_engine.core.errors import InvoiceValidationError
from invoice_engine.core.formatting import parse_date

# Exclusive upper bound for quantity, rate, tax rate and total
MAX_VALUE = Decimal(10) ** 12


@dataclass(frozen=True)
class Client:
	name: str
	email: Optional[str] = None
	address: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
	description: str
	quantity: Decimal
	rate: Decimal
	# Percentage, e.g. Decimal("18") for 18 %
	tax_rate: Decimal = Decimal("0")


@dataclass(frozen=True)
class InvoiceData:
	invoice_number: str
	issue_date: date
	due_date: date
	client: Optional[Client]
	items: Optional[Tuple[LineItem, ...]] = field(default_factory=tuple)
	# Upstream grand total; wins over subtotal + tax when present
	precomputed_total: Optional[Decimal] = None

	@classmethod
	def from_payload(cls, payload: Mapping[str, Any]) -> "InvoiceData":
		"""Build invoice data from the invoice API payload.

		Accepts snake_case keys with camelCase aliases, e.g.
		  {
			'invoice_number': 'INV-1', 'issue_date': '2026-10-19', 'due_date': '2026-11-03',
			'client_id': {'name': str, 'email'?: str, 'address'?: str},
			'items': [{'description': str, 'quantity': 2, 'rate': 100, 'tax_rate': 10}, ...],
			'total'?: 300,
		  }
		All mapping problems are collected and raised together.
		"""
		problems: List[str] = []

		number = _first(payload, "invoice_number", "invoiceNumber")
		issue = _date_field(payload, problems, "issue date", "issue_date", "issueDate")
		due = _date_field(payload, problems, "due date", "due_date", "dueDate")

		raw_client = _first(payload, "client", "client_id")
		client: Optional[Client] = None
		if isinstance(raw_client, Mapping):
			client = Client(
				name=str(raw_client.get("name") or "").strip(),
				email=_opt_str(raw_client.get("email")),
				address=_opt_str(raw_client.get("address")),
			)
		elif raw_client is not None:
			problems.append("client must be an object with a name")

		raw_items = payload.get("items")
		items: Optional[Tuple[LineItem, ...]] = None
		if raw_items is not None:
			if isinstance(raw_items, (list, tuple)):
				parsed: List[LineItem] = []
				for i, raw in enumerate(raw_items, 1):
					item = _line_item(raw, i, problems)
					if item is not None:
						parsed.append(item)
				items = tuple(parsed)
			else:
				problems.append("items must be a list")

		total_raw = _first(payload, "total", "precomputed_total", "precomputedTotal")
		precomputed: Optional[Decimal] = None
		if total_raw not in (None, ""):
			try:
				precomputed = parse_decimal(total_raw)
			except ValueError as e:
				problems.append(f"total: {e}")

		if problems:
			raise InvoiceValidationError(problems)

		return cls(
			invoice_number=str(number or "").strip(),
			issue_date=issue,  # type: ignore[arg-type]
			due_date=due,  # type: ignore[arg-type]
			client=client,
			items=items,
			precomputed_total=precomputed,
		)


def validate_invoice(data: InvoiceData) -> List[str]:
	"""Return structural problems with the invoice; an empty list means valid.

	Business rules (payability, due dates) are not checked here.
	"""
	problems: List[str] = []
	if not (data.invoice_number or "").strip():
		problems.append("invoice number is required")
	if not isinstance(data.issue_date, date):
		problems.append("issue date is required")
	if not isinstance(data.due_date, date):
		problems.append("due date is required")
	if data.client is None:
		problems.append("client is required")
	elif not (data.client.name or "").strip():
		problems.append("client name is required")
	if isinstance(data.precomputed_total, Decimal) and _out_of_range(data.precomputed_total):
		problems.append("total is out of range")
	if data.items is None:
		problems.append("items must not be null")
		return problems
	for i, item in enumerate(data.items, 1):
		if not (item.description or "").strip():
			problems.append(f"item {i}: description is required")
		if not isinstance(item.quantity, Decimal) or item.quantity <= 0:
			problems.append(f"item {i}: quantity must be greater than 0")
		elif _out_of_range(item.quantity):
			problems.append(f"item {i}: quantity is out of range")
		if not isinstance(item.rate, Decimal) or item.rate < 0:
			problems.append(f"item {i}: rate must not be negative")
		elif _out_of_range(item.rate):
			problems.append(f"item {i}: rate is out of range")
		if not isinstance(item.tax_rate, Decimal) or item.tax_rate < 0:
			problems.append(f"item {i}: tax rate must not be negative")
		elif _out_of_range(item.tax_rate):
			problems.append(f"item {i}: tax rate is out of range")
	return problems


def _out_of_range(value: Decimal) -> bool:
	return not value.is_finite() or abs(value) >= MAX_VALUE


def _first(d: Mapping[str, Any], *keys: str) -> Any:
	for k in keys:
		if k in d and d[k] is not None:
			return d[k]
	return None


def _opt_str(val: Any) -> Optional[str]:
	s = str(val).strip() if val is not None else ""
	return s or None


def _date_field(payload: Mapping[str, Any], problems: List[str], label: str, *keys: str) -> Optional[date]:
	raw = _first(payload, *keys)
	if raw is None:
		problems.append(f"{label} is required")
		return None
	try:
		return parse_date(raw)
	except ValueError as e:
		problems.append(f"{label}: {e}")
		return None


def _line_item(raw: Any, index: int, problems: List[str]) -> Optional[LineItem]:
	if not isinstance(raw, Mapping):
		problems.append(f"item {index}: must be an object")
		return None
	ok = True
	values = {}
	for name, keys, default in (
		("quantity", ("quantity", "qty"), None),
		("rate", ("rate",), None),
		("tax_rate", ("tax_rate", "taxRate"), Decimal("0")),
	):
		val = _first(raw, *keys)
		if val in (None, "") and default is not None:
			values[name] = default
			continue
		try:
			values[name] = parse_decimal(val)
		except ValueError as e:
			problems.append(f"item {index}: {name.replace('_', ' ')}: {e}")
			ok = False
	if not ok:
		return None
	return LineItem(
		description=str(raw.get("description") or ""),
		quantity=values["quantity"],
		rate=values["rate"],
		tax_rate=values["tax_rate"],
	)
