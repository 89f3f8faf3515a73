from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from reportlab.lib import colors

from invoice_engine.core.currency import round_money_dec
from invoice_engine.core.formatting import Formatters
from invoice_engine.core.totals import InvoiceTotals, line_amount
from invoice_engine.data.models import Client, InvoiceData, LineItem
from invoice_engine.pdf.canvas import PAGE_SIZE, Page, TextStyle
from invoice_engine.pdf.document import FOOTER_RESERVE, MARGIN, InvoiceDocument

logger = logging.getLogger(__name__)


# ===== Layout constants (tweak here) =====
PAGE_WIDTH, PAGE_HEIGHT = PAGE_SIZE

CONTENT_LEFT = MARGIN
CONTENT_RIGHT = PAGE_WIDTH - MARGIN
CONTENT_TOP = PAGE_HEIGHT - MARGIN
# Rows and totals stop above the page label strip
CONTENT_BOTTOM = MARGIN + FOOTER_RESERVE
PRINTABLE_WIDTH = CONTENT_RIGHT - CONTENT_LEFT

# Typography
TITLE_FONT_SIZE = 20
TEXT_FONT_SIZE = 10
TOTAL_FONT_SIZE = 12
LINE_GAP = 15          # baseline-to-baseline in header/client blocks
TITLE_TO_BLOCK_GAP = 20
BLOCK_GAP = 30         # header block -> "Bill To"
TABLE_TOP_GAP = 20     # client block -> table band
DESCENT_PAD = 5
MAX_ADDRESS_LINES = 4

# Table columns as fractions of the printable width; Description absorbs most of the row
DESC_FRAC = 0.52
QTY_FRAC = 0.12
RATE_FRAC = 0.18
# Amount takes the remainder up to the right margin

QTY_X = CONTENT_LEFT + PRINTABLE_WIDTH * DESC_FRAC
RATE_X = QTY_X + PRINTABLE_WIDTH * QTY_FRAC
AMOUNT_X = RATE_X + PRINTABLE_WIDTH * RATE_FRAC

CELL_PAD = 6
DESC_TEXT_X = CONTENT_LEFT + CELL_PAD
DESC_MAX_W = QTY_X - DESC_TEXT_X - CELL_PAD
QTY_RIGHT = RATE_X - CELL_PAD
RATE_RIGHT = AMOUNT_X - CELL_PAD
AMOUNT_RIGHT = CONTENT_RIGHT - CELL_PAD
HALF_W = PRINTABLE_WIDTH / 2 - CELL_PAD

ROW_HEIGHT = 20
TABLE_HEADER_HEIGHT = 20
ROW_BASELINE = 14      # row top -> text baseline

TOTALS_GAP = 10        # separator line sits in the middle of this gap
TOTALS_ROWS = 3
TOTALS_BLOCK_HEIGHT = TOTALS_GAP + TOTALS_ROWS * ROW_HEIGHT

# Colors
TEXT_COLOR = colors.black
BAND_COLOR = colors.Color(0.9, 0.9, 0.9)
RULE_COLOR = colors.Color(0.8, 0.8, 0.8)
ROW_RULE_COLOR = colors.Color(0.93, 0.93, 0.93)

COLUMN_CAPTIONS = ("Description", "Qty", "Rate", "Amount")

REGULAR = TextStyle("regular", TEXT_FONT_SIZE, TEXT_COLOR)
BOLD = TextStyle("bold", TEXT_FONT_SIZE, TEXT_COLOR)
TITLE = TextStyle("bold", TITLE_FONT_SIZE, TEXT_COLOR)
TOTAL = TextStyle("bold", TOTAL_FONT_SIZE, TEXT_COLOR)


@dataclass(frozen=True)
class Issuer:
    name: str = ""
    address: str = ""
    email: str = ""


@dataclass(frozen=True)
class LayoutSummary:
    """Where things ended up; rows_per_page is indexed like document.pages."""

    rows_per_page: Tuple[int, ...]
    totals_page: int
    truncated: int = 0

    @property
    def page_count(self) -> int:
        return len(self.rows_per_page)

    @property
    def row_count(self) -> int:
        return sum(self.rows_per_page)


def rows_per_full_page() -> int:
    """Item rows that fit on a continuation page under the table band."""
    available = CONTENT_TOP - TABLE_HEADER_HEIGHT - CONTENT_BOTTOM
    return int(available // ROW_HEIGHT)


def _address_lines(address: Optional[str]) -> List[str]:
    lines = [ln.strip() for ln in str(address or "").splitlines() if ln.strip()]
    return lines[:MAX_ADDRESS_LINES]


class InvoiceLayout:
    """Places header, client block, items table and totals on document pages.

    Holds configuration only; all per-invoice state lives in the document and
    its pages, so one layout may serve concurrent generations.
    """

    def __init__(self, formatters: Formatters, issuer: Issuer = Issuer(), title: str = "INVOICE") -> None:
        self.formatters = formatters
        self.issuer = issuer
        self.title = title

    @classmethod
    def from_settings(cls, settings: Any, formatters: Optional[Formatters] = None) -> "InvoiceLayout":
        return cls(
            formatters or Formatters.from_settings(settings),
            Issuer(settings.issuer_name, settings.issuer_address, settings.issuer_email),
            settings.document_title,
        )

    # ===== Helpers =====
    def _money(self, value: Decimal) -> str:
        return self.formatters.money(round_money_dec(value))

    @staticmethod
    def _has_room(page: Page, height: float) -> bool:
        return page.cursor.y - height >= CONTENT_BOTTOM - 1e-6

    @staticmethod
    def _set_y(page: Page, y: float) -> None:
        page.move_down(page.cursor.y - y)

    # ===== Blocks =====
    def draw_header(self, page: Page, invoice: InvoiceData) -> None:
        """Title and issuer block on the left, invoice number and dates right-aligned."""
        top = page.cursor.y
        title_y = top - TITLE_FONT_SIZE * 0.8
        page.draw_text(page.fit_text(self.title, HALF_W, TITLE), CONTENT_LEFT, title_y, TITLE)

        left: List[Tuple[str, TextStyle]] = []
        if self.issuer.name:
            left.append((self.issuer.name, BOLD))
        left.extend((ln, REGULAR) for ln in _address_lines(self.issuer.address))
        if self.issuer.email:
            left.append((self.issuer.email, REGULAR))

        fmt_date = self.formatters.date
        right = [
            (f"Invoice #: {invoice.invoice_number}", BOLD),
            (f"Date: {fmt_date(invoice.issue_date)}", REGULAR),
            (f"Due Date: {fmt_date(invoice.due_date)}", REGULAR),
        ]

        first_y = title_y - TITLE_TO_BLOCK_GAP
        last_y = first_y
        y = first_y
        for text, style in left:
            page.draw_text(page.fit_text(text, HALF_W, style), CONTENT_LEFT, y, style)
            last_y = y
            y -= LINE_GAP
        y = first_y
        for text, style in right:
            page.draw_text_right(page.fit_text(text, HALF_W, style), CONTENT_RIGHT, y, style)
            last_y = min(last_y, y)
            y -= LINE_GAP
        self._set_y(page, last_y - DESCENT_PAD)

    def draw_client_block(self, page: Page, client: Client) -> None:
        y = page.cursor.y - BLOCK_GAP
        page.draw_text("Bill To:", CONTENT_LEFT, y, BOLD)
        lines = [client.name]
        if client.email:
            lines.append(client.email)
        lines.extend(_address_lines(client.address))
        for ln in lines:
            y -= LINE_GAP
            page.draw_text(page.fit_text(ln, HALF_W, REGULAR), CONTENT_LEFT, y, REGULAR)
        self._set_y(page, y - DESCENT_PAD)

    def draw_table_header(self, page: Page) -> None:
        """Shaded band with the four column captions at the cursor."""
        top = page.cursor.y
        page.fill_rect(CONTENT_LEFT, top - TABLE_HEADER_HEIGHT, PRINTABLE_WIDTH, TABLE_HEADER_HEIGHT, BAND_COLOR)
        baseline = top - ROW_BASELINE
        desc, qty, rate, amount = COLUMN_CAPTIONS
        page.draw_text(desc, DESC_TEXT_X, baseline, BOLD)
        page.draw_text_right(qty, QTY_RIGHT, baseline, BOLD)
        page.draw_text_right(rate, RATE_RIGHT, baseline, BOLD)
        page.draw_text_right(amount, AMOUNT_RIGHT, baseline, BOLD)
        page.move_down(TABLE_HEADER_HEIGHT)

    def draw_item_row(self, page: Page, item: LineItem) -> bool:
        """Draw one fixed-height row. Returns True when the description was truncated."""
        top = page.cursor.y
        baseline = top - ROW_BASELINE
        collapsed = " ".join(str(item.description or "").split())
        desc = page.fit_text(collapsed, DESC_MAX_W, REGULAR)
        page.draw_text(desc, DESC_TEXT_X, baseline, REGULAR)
        page.draw_text_right(self.formatters.quantity(item.quantity), QTY_RIGHT, baseline, REGULAR)
        page.draw_text_right(self._money(item.rate), RATE_RIGHT, baseline, REGULAR)
        page.draw_text_right(self._money(line_amount(item)), AMOUNT_RIGHT, baseline, REGULAR)
        bottom = top - ROW_HEIGHT
        page.draw_line((CONTENT_LEFT, bottom), (CONTENT_RIGHT, bottom), 0.5, ROW_RULE_COLOR)
        page.move_down(ROW_HEIGHT)
        return desc != collapsed

    def draw_totals(self, page: Page, totals: InvoiceTotals) -> None:
        top = page.cursor.y
        sep_y = top - TOTALS_GAP / 2
        page.draw_line((RATE_X, sep_y), (CONTENT_RIGHT, sep_y), 1, RULE_COLOR)
        page.move_down(TOTALS_GAP)
        rows = (
            ("Subtotal:", totals.subtotal, REGULAR),
            ("Tax:", totals.tax_total, REGULAR),
            ("Total:", totals.grand_total, TOTAL),
        )
        for label, value, style in rows:
            baseline = page.cursor.y - ROW_BASELINE
            page.draw_text_right(label, RATE_RIGHT, baseline, style)
            page.draw_text_right(self._money(value), AMOUNT_RIGHT, baseline, style)
            page.move_down(ROW_HEIGHT)

    # ===== Driver =====
    def render(self, document: InvoiceDocument, invoice: InvoiceData, totals: InvoiceTotals) -> LayoutSummary:
        """Lay out a validated invoice, asking the document for pages as needed."""
        items = tuple(invoice.items or ())
        page = document.new_page()
        self.draw_header(page, invoice)
        self.draw_client_block(page, invoice.client)  # type: ignore[arg-type]
        page.move_down(TABLE_TOP_GAP)

        rows: List[int] = [0]
        table_open = False
        truncated = 0
        for index, item in enumerate(items):
            need = ROW_HEIGHT if table_open else TABLE_HEADER_HEIGHT + ROW_HEIGHT
            if not self._has_room(page, need):
                logger.debug("Page break before item %d on page %d", index + 1, page.number)
                page = document.new_page()
                rows.append(0)
                table_open = False
            if not table_open:
                self.draw_table_header(page)
                table_open = True
            if self.draw_item_row(page, item):
                truncated += 1
            rows[-1] += 1

        # An empty table still shows its band right above the totals
        need = TOTALS_BLOCK_HEIGHT + (0 if items else TABLE_HEADER_HEIGHT)
        if not self._has_room(page, need):
            logger.debug("Totals moved to a new page after page %d", page.number)
            page = document.new_page()
            rows.append(0)
        if not items:
            self.draw_table_header(page)
        self.draw_totals(page, totals)

        if truncated:
            logger.debug("Truncated %d description(s) to the column width", truncated)
        return LayoutSummary(tuple(rows), totals_page=len(rows) - 1, truncated=truncated)
