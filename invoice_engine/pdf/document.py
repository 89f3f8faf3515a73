from __future__ import annotations

import logging
from io import BytesIO
from typing import List, Optional, Tuple

from reportlab.lib import colors
from reportlab.pdfgen.canvas import Canvas

from invoice_engine.core.errors import DocumentFinalizedError, SerializationError
from invoice_engine.pdf.canvas import PAGE_SIZE, Cursor, FontSet, Page

logger = logging.getLogger(__name__)

# Margins on all sides (points)
MARGIN = 50.0
# Strip at the bottom of the content area holding the page label
FOOTER_RESERVE = 20.0
PAGE_LABEL_FONT_SIZE = 8
PAGE_LABEL_COLOR = colors.Color(0.45, 0.45, 0.45)


class InvoiceDocument:
    """Ordered pages plus metadata; serialized to PDF bytes exactly once.

    Lifecycle: empty -> pages appended via new_page() -> serialize().
    After the first serialize() the document is read-only and further calls
    return the same bytes.
    """

    def __init__(self, fonts: FontSet, title: str = "", author: str = "",
                 page_size: Tuple[float, float] = PAGE_SIZE, page_label: str = "") -> None:
        self.fonts = fonts
        self.title = title
        self.author = author
        self.page_size = page_size
        self.page_label = page_label
        self._pages: List[Page] = []
        self._data: Optional[bytes] = None

    @property
    def pages(self) -> Tuple[Page, ...]:
        return tuple(self._pages)

    @property
    def current_page(self) -> Optional[Page]:
        return self._pages[-1] if self._pages else None

    @property
    def finalized(self) -> bool:
        return self._data is not None

    def new_page(self) -> Page:
        """Close the current page and append a fresh one with the cursor at the content top."""
        if self.finalized:
            raise DocumentFinalizedError("document is already serialized")
        if self._pages:
            self._pages[-1].close()
        _, height = self.page_size
        page = Page(
            self.fonts,
            size=self.page_size,
            number=len(self._pages) + 1,
            cursor=Cursor(MARGIN, height - MARGIN),
        )
        self._pages.append(page)
        logger.debug("Started page %d", page.number)
        return page

    def _draw_page_label(self, c: Canvas, number: int, count: int) -> None:
        if not self.page_label:
            return
        label = self.page_label.format(number=number, count=count)
        width = self.page_size[0]
        c.setFillColor(PAGE_LABEL_COLOR)
        c.setFont(self.fonts.regular, PAGE_LABEL_FONT_SIZE)
        c.drawRightString(width - MARGIN, MARGIN + 6, label)

    def serialize(self) -> bytes:
        if self._data is not None:
            return self._data
        if not self._pages:
            raise SerializationError("cannot serialize a document with no pages")
        for i, page in enumerate(self._pages, 1):
            if page.number != i:
                raise SerializationError(f"page sequence broken at position {i} (page {page.number})")
            page.close()

        buf = BytesIO()
        # invariant=1 keeps output byte-stable (no timestamps or random IDs)
        c = Canvas(buf, pagesize=self.page_size, invariant=1)
        c.setTitle(self.title)
        c.setAuthor(self.author)
        c.setCreator("invoice_engine")
        count = len(self._pages)
        for page in self._pages:
            page.render(c)
            self._draw_page_label(c, page.number, count)
            c.showPage()
        c.save()

        self._data = buf.getvalue()
        logger.debug("Serialized %d page(s), %d bytes", count, len(self._data))
        return self._data
