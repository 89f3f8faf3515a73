from __future__ import annotations

from io import BytesIO

import pytest
from pypdf import PdfReader

from invoice_engine.core.errors import DocumentFinalizedError, PageClosedError, SerializationError
from invoice_engine.pdf.canvas import load_fonts
from invoice_engine.pdf.document import MARGIN, InvoiceDocument


def _doc(**kwargs) -> InvoiceDocument:
    return InvoiceDocument(load_fonts(), title="Invoice T-1", **kwargs)


def test_serializing_empty_document_is_an_error() -> None:
    with pytest.raises(SerializationError):
        _doc().serialize()


def test_new_page_closes_previous_and_resets_cursor() -> None:
    doc = _doc()
    first = doc.new_page()
    first.move_down(300)
    second = doc.new_page()
    assert first.closed and not second.closed
    assert second.number == 2
    assert second.cursor.x == MARGIN
    assert second.cursor.y == pytest.approx(doc.page_size[1] - MARGIN)
    with pytest.raises(PageClosedError):
        first.draw_text("x", 0, 0)


def test_serialize_is_idempotent_and_freezes_document() -> None:
    doc = _doc()
    doc.new_page().draw_text("hello", 100, 700)
    first = doc.serialize()
    assert doc.finalized
    assert doc.serialize() == first
    with pytest.raises(DocumentFinalizedError):
        doc.new_page()
    with pytest.raises(PageClosedError):
        doc.pages[0].draw_text("more", 0, 0)


def test_same_content_gives_identical_bytes() -> None:
    outputs = []
    for _ in range(2):
        doc = _doc()
        doc.new_page().draw_text("stable", 100, 700)
        outputs.append(doc.serialize())
    assert outputs[0] == outputs[1]


def test_page_labels_and_metadata() -> None:
    doc = _doc(author="My Company Name", page_label="Page {number} of {count}")
    for _ in range(3):
        doc.new_page()
    reader = PdfReader(BytesIO(doc.serialize()))
    assert len(reader.pages) == 3
    assert "Page 2 of 3" in (reader.pages[1].extract_text() or "")
    assert reader.metadata.title == "Invoice T-1"
    assert reader.metadata.author == "My Company Name"
