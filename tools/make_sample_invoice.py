from __future__ import annotations

from datetime import date as _date
from datetime import datetime, timedelta
from pathlib import Path
import sys

# Ensure we can import the invoice_engine package when running this script directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from invoice_engine.core.settings import load_settings
from invoice_engine.output.delivery import preview_pdf
from invoice_engine.pdf.invoice_generator import InvoiceGenerator, write_invoice_pdf


def _items(count: int) -> list[dict]:
    rows = [
        {"description": "Electrical inspection and diagnostics", "quantity": 1, "rate": "120.00", "tax_rate": 18},
        {"description": "Wiring repair (per room)", "quantity": 2, "rate": "85.50", "tax_rate": 18},
        {"description": "LED fixture installation", "quantity": 3, "rate": "45.00", "tax_rate": 5},
        {"description": "Breaker replacement", "quantity": 1, "rate": "65.75", "tax_rate": 0},
        {"description": "Safety compliance testing", "quantity": "1.5", "rate": "90.00", "tax_rate": 12},
    ]
    return [dict(rows[i % len(rows)]) for i in range(count)]


def main(argv: list[str]) -> None:
    """Usage: make_sample_invoice.py [item_count] [--preview]"""
    settings = load_settings()
    count = int(argv[0]) if argv and argv[0].isdigit() else 5
    today = _date.today()
    data = {
        "invoice_number": f"SAMPLE-{count}",
        "issue_date": today,
        "due_date": today + timedelta(days=15),
        "client": {
            "name": "Sample Customer",
            "email": "billing@example.com",
            "address": "123 Sample St\nMetropolis",
        },
        "items": _items(count),
    }

    if "--preview" in argv:
        pdf = InvoiceGenerator(settings).generate(data)
        with preview_pdf(pdf, "sample.pdf") as path:
            input(f"Previewing {path}; press Enter to close...")
        return

    # Write under repository assets/samples to avoid permission or file-lock issues
    out_dir = ROOT / "assets" / "samples"
    try:
        out_pdf = write_invoice_pdf(out_dir, data, settings)
    except PermissionError:
        # If the file is open/locked, write to a timestamped folder instead
        ts = datetime.now().strftime("%Y%m%d-%H%M%S")
        out_pdf = write_invoice_pdf(out_dir / ts, data, settings)
    print(f"Wrote sample to: {out_pdf}")


if __name__ == "__main__":
    main(sys.argv[1:])
