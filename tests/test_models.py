from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from invoice_engine.core.errors import InvoiceValidationError
from invoice_engine.data.models import Client, InvoiceData, LineItem, validate_invoice


def _payload(**overrides):
    payload = {
        "invoice_number": "INV-1001",
        "issue_date": "2026-10-19T00:00:00.000Z",
        "due_date": "2026-11-03",
        "client_id": {"name": "Acme Corp", "email": "ap@acme.test", "address": "1 Road\nTown"},
        "items": [
            {"description": "A", "quantity": 2, "rate": 100, "tax_rate": 10},
            {"description": "B", "quantity": "1", "rate": "50"},
        ],
    }
    payload.update(overrides)
    return payload


def test_from_payload_maps_api_shape() -> None:
    inv = InvoiceData.from_payload(_payload(total=300))
    assert inv.invoice_number == "INV-1001"
    assert inv.issue_date == date(2026, 10, 19)
    assert inv.due_date == date(2026, 11, 3)
    assert inv.client == Client("Acme Corp", "ap@acme.test", "1 Road\nTown")
    assert inv.items == (
        LineItem("A", Decimal("2"), Decimal("100"), Decimal("10")),
        LineItem("B", Decimal("1"), Decimal("50"), Decimal("0")),
    )
    assert inv.precomputed_total == Decimal("300")
    assert validate_invoice(inv) == []


def test_from_payload_accepts_camel_case_aliases() -> None:
    inv = InvoiceData.from_payload({
        "invoiceNumber": "X-1",
        "issueDate": date(2026, 1, 1),
        "dueDate": date(2026, 1, 31),
        "client": {"name": "Solo"},
        "items": [{"description": "Hours", "qty": "1.5", "rate": "80", "taxRate": "5"}],
        "precomputedTotal": None,
    })
    assert inv.invoice_number == "X-1"
    assert inv.items[0].quantity == Decimal("1.5")
    assert inv.items[0].tax_rate == Decimal("5")
    assert inv.precomputed_total is None
    assert inv.client.email is None


def test_from_payload_collects_all_problems() -> None:
    bad = _payload(
        issue_date="not a date",
        due_date=None,
        items=[{"description": "A", "quantity": "two", "rate": 1}, "oops"],
        total="lots",
    )
    with pytest.raises(InvoiceValidationError) as exc:
        InvoiceData.from_payload(bad)
    problems = exc.value.problems
    assert len(problems) == 5
    assert any(p.startswith("issue date") for p in problems)
    assert "due date is required" in problems
    assert any(p.startswith("item 1: quantity") for p in problems)
    assert "item 2: must be an object" in problems
    assert any(p.startswith("total") for p in problems)


def test_missing_items_is_reported_as_null() -> None:
    payload = _payload()
    del payload["items"]
    inv = InvoiceData.from_payload(payload)
    assert inv.items is None
    assert validate_invoice(inv) == ["items must not be null"]


def test_validate_reports_structural_problems() -> None:
    inv = InvoiceData(
        invoice_number=" ",
        issue_date=date(2026, 1, 1),
        due_date=date(2026, 1, 2),
        client=Client(name=""),
        items=(
            LineItem("", Decimal("1"), Decimal("1")),
            LineItem("ok", Decimal("0"), Decimal("-1"), Decimal("-5")),
        ),
    )
    assert validate_invoice(inv) == [
        "invoice number is required",
        "client name is required",
        "item 1: description is required",
        "item 2: quantity must be greater than 0",
        "item 2: rate must not be negative",
        "item 2: tax rate must not be negative",
    ]


def test_validate_requires_client() -> None:
    inv = InvoiceData("N-1", date(2026, 1, 1), date(2026, 1, 1), client=None, items=())
    assert validate_invoice(inv) == ["client is required"]


def test_validate_rejects_amounts_beyond_the_supported_range() -> None:
    inv = InvoiceData(
        invoice_number="INV-9",
        issue_date=date(2026, 1, 1),
        due_date=date(2026, 1, 2),
        client=Client(name="Big Spender"),
        items=(
            LineItem("huge rate", Decimal("1"), Decimal("1e26")),
            LineItem("huge qty", Decimal("1e12"), Decimal("1")),
            LineItem("largest accepted", Decimal("999999999999"), Decimal("999999999999.99")),
        ),
        precomputed_total=Decimal("1e30"),
    )
    assert validate_invoice(inv) == [
        "total is out of range",
        "item 1: rate is out of range",
        "item 2: quantity is out of range",
    ]
