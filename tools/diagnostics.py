from __future__ import annotations

import os
import sys
import traceback
from datetime import date, timedelta
from importlib import import_module
from pathlib import Path

# Ensure we can import the invoice_engine package when running this script directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

RESULTS: list[str] = []


def _ok(msg: str) -> None:
    RESULTS.append(f"OK: {msg}")


def _fail(msg: str, e: BaseException | None = None) -> None:
    if e:
        RESULTS.append(f"FAIL: {msg} -> {e}")
    else:
        RESULTS.append(f"FAIL: {msg}")


def env_info() -> None:
    _ok(f"Python {sys.version.split()[0]} on {sys.platform}")
    _ok(f"CWD: {os.getcwd()}")


def import_all_engine_modules() -> None:
    # Sub-packages have no __init__.py, so walk the tree instead of pkgutil
    pkg_dir = ROOT / "invoice_engine"
    mods = sorted(
        ".".join(p.relative_to(ROOT).with_suffix("").parts)
        for p in pkg_dir.rglob("*.py")
    )
    failures = 0
    for name in mods:
        try:
            import_module(name)
        except Exception as e:
            failures += 1
            _fail(f"import {name}", e)
    if failures == 0:
        _ok(f"Imported {len(mods)} modules under invoice_engine/*")
    else:
        _fail(f"{failures} module(s) failed to import")


essential_runtime_checks_ran = False

def pdf_checks(tmp_dir: Path) -> None:
    global essential_runtime_checks_ran
    try:
        from invoice_engine.pdf.invoice_generator import write_invoice_pdf
        from invoice_engine.pdf.layout import rows_per_full_page
        from pypdf import PdfReader
    except Exception as e:
        _fail("import runtime modules (pdf)", e)
        return

    inv_no = f"DIAG-{date.today().strftime('%Y%m%d')}"
    count = rows_per_full_page() + 10
    data = {
        'invoice_number': inv_no,
        'issue_date': date.today(),
        'due_date': date.today() + timedelta(days=15),
        'client': {'name': 'Diag Client', 'email': 'diag@example.com', 'address': 'A'},
        'items': [
            {'description': f'Line {i}', 'quantity': 1, 'rate': '1.23', 'tax_rate': 10}
            for i in range(1, count + 1)
        ],
    }
    try:
        out_pdf = write_invoice_pdf(tmp_dir, data)
        if out_pdf.exists() and out_pdf.stat().st_size > 0:
            _ok(f"Built PDF {out_pdf.name} ({out_pdf.stat().st_size} bytes)")
        else:
            _fail("PDF not created or empty")
            return
        reader = PdfReader(str(out_pdf))
        if len(reader.pages) >= 2:
            _ok(f"PDF paginated into {len(reader.pages)} pages for {count} items")
        else:
            _fail(f"expected pagination for {count} items, got {len(reader.pages)} page(s)")
        txt = "\n".join(p.extract_text() or "" for p in reader.pages)
        if "Due Date:" in txt and "Total:" in txt:
            _ok("PDF contains expected labels (Due Date/Total)")
        else:
            _fail("PDF text missing expected labels")
    except Exception as e:
        traceback.print_exc()
        _fail("generate/read PDF", e)
        return

    essential_runtime_checks_ran = True


def main() -> None:
    tmp_dir = Path.cwd() / ".diag_out"
    tmp_dir.mkdir(exist_ok=True)

    env_info()
    import_all_engine_modules()
    pdf_checks(tmp_dir)

    print("==== Diagnostics ====")
    for line in RESULTS:
        print(line)
    if essential_runtime_checks_ran:
        print("RESULT: PASS (core runtime checks succeeded)")
    else:
        print("RESULT: WARN/FAIL (see failures above)")


if __name__ == "__main__":
    main()
