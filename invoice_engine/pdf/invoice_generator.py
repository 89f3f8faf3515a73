"""
Invoice PDF generation: validates invoice data, lays it out on A4 pages and
serializes the result to PDF bytes.

Generation is all-or-nothing: invalid input raises InvoiceValidationError
before any page exists, and nothing is written to disk unless the whole
document serialized.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

from invoice_engine.core.currency import code_prefix
from invoice_engine.core.errors import FontResourceError, InvoiceValidationError
from invoice_engine.core.formatting import Formatters
from invoice_engine.core.paths import default_output_dir
from invoice_engine.core.settings import Settings
from invoice_engine.core.totals import calculate_totals
from invoice_engine.data.models import InvoiceData, validate_invoice
from invoice_engine.output.delivery import invoice_filename, save_pdf
from invoice_engine.pdf.canvas import FontSet, load_fonts
from invoice_engine.pdf.document import InvoiceDocument
from invoice_engine.pdf.layout import InvoiceLayout, LayoutSummary

logger = logging.getLogger(__name__)

InvoiceInput = Union[InvoiceData, Mapping[str, Any]]


def _coerce_invoice(data: InvoiceInput) -> InvoiceData:
    if isinstance(data, InvoiceData):
        return data
    if isinstance(data, Mapping):
        return InvoiceData.from_payload(data)
    raise InvoiceValidationError([f"unsupported invoice input: {type(data).__name__}"])


class InvoiceGenerator:
    """Reusable generator; safe to share across threads.

    Fonts are loaded here, so a missing or broken font file surfaces as
    FontResourceError at construction, never halfway through a document.
    """

    def __init__(self, settings: Optional[Settings] = None, fonts: Optional[FontSet] = None,
                 formatters: Optional[Formatters] = None) -> None:
        self.settings = settings or Settings()
        self.fonts = fonts or load_fonts(self.settings.font_regular_path, self.settings.font_bold_path)
        self.layout = InvoiceLayout.from_settings(self.settings, self._checked_formatters(formatters))

    def _checked_formatters(self, formatters: Optional[Formatters]) -> Formatters:
        """Make sure the fonts can draw formatted amounts.

        With settings-built formatters a currency symbol the fonts lack is
        replaced by the currency code ('INR 5.00'); caller-supplied
        formatters that the fonts cannot draw raise FontResourceError.
        """
        chosen = formatters or Formatters.from_settings(self.settings)
        missing = self.fonts.missing_glyphs(chosen.money(Decimal("-1234567.89")))
        if not missing:
            return chosen
        if formatters is not None:
            raise FontResourceError(f"fonts {self.fonts!r} cannot draw {missing!r} used in amounts")
        logger.warning(
            "Fonts %r cannot draw %r; amounts are prefixed with the currency code %s instead",
            self.fonts, missing, self.settings.currency,
        )
        return Formatters.from_settings(self.settings, symbol=code_prefix(self.settings.currency))

    def build_document(self, data: InvoiceInput) -> Tuple[InvoiceDocument, LayoutSummary]:
        invoice = _coerce_invoice(data)
        problems = validate_invoice(invoice)
        if problems:
            raise InvoiceValidationError(problems)

        items = invoice.items or ()
        logger.info("Generating invoice %s (%d item(s))", invoice.invoice_number, len(items))
        totals = calculate_totals(items, invoice.precomputed_total)
        document = InvoiceDocument(
            self.fonts,
            title=f"Invoice {invoice.invoice_number}",
            author=self.settings.issuer_name,
            page_label=self.settings.page_label,
        )
        summary = self.layout.render(document, invoice, totals)
        return document, summary

    def generate(self, data: InvoiceInput) -> bytes:
        invoice = _coerce_invoice(data)
        document, summary = self.build_document(invoice)
        pdf = document.serialize()
        logger.info(
            "Generated invoice %s (%d page(s), %d bytes)",
            invoice.invoice_number, summary.page_count, len(pdf),
        )
        return pdf


# ===== Public API =====
def build_invoice_pdf(data: InvoiceInput, settings: Optional[Settings] = None) -> bytes:
    """Generate the invoice PDF and return its bytes.

    data is an InvoiceData or the invoice API payload, e.g.:
    {
      "invoice_number": str, "issue_date": date|str, "due_date": date|str,
      "client": {"name": str, "email"?: str, "address"?: str},
      "items": [{"description": str, "quantity": num, "rate": num, "tax_rate"?: num}, ...],
      "total"?: num
    }
    """
    return InvoiceGenerator(settings).generate(data)


def write_invoice_pdf(out_dir: Union[Path, str, None], data: InvoiceInput, settings: Optional[Settings] = None) -> Path:
    """Generate the invoice and save it as Invoice-<number>.pdf under out_dir.

    Without out_dir, settings.output_dir is used, then ~/Documents/Invoices.
    """
    settings = settings or Settings()
    if out_dir is None:
        out_dir = settings.output_dir or default_output_dir()
    invoice = _coerce_invoice(data)
    pdf = InvoiceGenerator(settings).generate(invoice)
    name = invoice_filename(invoice.invoice_number, settings.file_name_template)
    path = save_pdf(pdf, out_dir, name)
    logger.info("Saved invoice %s to %s", invoice.invoice_number, path)
    return path
