from __future__ import annotations

from pathlib import Path

from invoice_engine.output.delivery import (
    content_disposition,
    invoice_filename,
    preview_pdf,
    save_pdf,
)


def test_invoice_filename() -> None:
    assert invoice_filename("INV-1001") == "Invoice-INV-1001.pdf"
    assert invoice_filename(" 42 ") == "Invoice-42.pdf"
    assert invoice_filename('A:B*C?"D"') == "Invoice-A-B-C-D-.pdf"
    assert invoice_filename("", "{number}") == "unnumbered.pdf"
    assert invoice_filename("7", "Rechnung {number}") == "Rechnung 7.pdf"


def test_content_disposition_header() -> None:
    assert content_disposition("Invoice-1.pdf") == 'attachment; filename="Invoice-1.pdf"'


def test_save_pdf_leaves_no_temp_file(tmp_path: Path) -> None:
    out = save_pdf(b"%PDF-1.4 test", tmp_path / "a" / "b", "Invoice-1.pdf")
    assert out.read_bytes() == b"%PDF-1.4 test"
    assert sorted(p.name for p in out.parent.iterdir()) == ["Invoice-1.pdf"]


def test_preview_file_is_revoked_after_use() -> None:
    opened: list[str] = []

    def opener(path: str) -> bool:
        opened.append(path)
        return True

    with preview_pdf(b"%PDF-1.4 preview", "Invoice-9.pdf", opener=opener) as path:
        assert path.exists()
        assert path.read_bytes() == b"%PDF-1.4 preview"
        assert path.name.endswith("Invoice-9.pdf")
    assert opened == [str(path)]
    assert not path.exists()


def test_preview_survives_viewer_failure() -> None:
    with preview_pdf(b"%PDF", opener=lambda p: False) as path:
        assert path.exists()
    assert not path.exists()
