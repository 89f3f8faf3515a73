from __future__ import annotations

import logging
import os
import re
import subprocess
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DEFAULT_TEMPLATE = "Invoice-{number}"

_UNSAFE = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


def invoice_filename(number: str, template: str = DEFAULT_TEMPLATE) -> str:
    """Download name for an invoice, e.g. 'Invoice-INV-0001.pdf'.

    Characters that are not allowed in file names are replaced with '-'.
    """
    safe_number = _UNSAFE.sub("-", str(number).strip()) or "unnumbered"
    stem = (template or DEFAULT_TEMPLATE).format(number=safe_number)
    stem = _UNSAFE.sub("-", stem).strip(" .") or f"Invoice-{safe_number}"
    return f"{stem}.pdf"


def content_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"'


def save_pdf(pdf: bytes, out_dir: Union[Path, str], filename: str) -> Path:
    """Write PDF bytes under out_dir; the target only appears once fully written."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    target = out / filename
    tmp = target.with_suffix(target.suffix + ".tmp")
    tmp.write_bytes(pdf)
    tmp.replace(target)
    return target


def open_file(path: Union[Path, str]) -> bool:
    """Open a file in the platform's default viewer. Returns False on failure."""
    path = str(path)
    try:
        if sys.platform == "win32":
            os.startfile(path)  # type: ignore[attr-defined]
        elif sys.platform == "darwin":
            subprocess.Popen(["open", path])
        else:
            subprocess.Popen(["xdg-open", path])
        return True
    except Exception:
        logger.exception("Failed to open file: %s", path)
        return False


@contextmanager
def preview_pdf(pdf: bytes, filename: Optional[str] = None,
                opener: Callable[[str], bool] = open_file) -> Iterator[Path]:
    """Expose PDF bytes as a temporary local file for previewing.

    The file is handed to `opener` and removed when the block exits, which
    revokes the reference.
    """
    suffix = f"-{filename}" if filename else ".pdf"
    fd, name = tempfile.mkstemp(prefix="invoice-preview-", suffix=suffix)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(pdf)
        if not opener(str(path)):
            logger.warning("Preview viewer could not be opened for %s", path)
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            # Windows keeps files open in a viewer locked
            logger.warning("Could not remove preview file %s", path)
