from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from reportlab.lib import colors
from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen.canvas import Canvas

from invoice_engine.core.errors import FontResourceError, PageClosedError, UnknownFontError
from invoice_engine.core.paths import resource_path

logger = logging.getLogger(__name__)

PAGE_SIZE = A4
FACES = ("regular", "bold")
ELLIPSIS = "…"

Point = Tuple[float, float]


# ===== Fonts =====
class FontSet:
    """The two faces a page may draw with, mapped to registered reportlab fonts.

    Immutable once built; one instance is shared by every generation.
    """

    def __init__(self, regular: str, bold: str) -> None:
        self._names: Dict[str, str] = {"regular": regular, "bold": bold}

    @property
    def regular(self) -> str:
        return self._names["regular"]

    @property
    def bold(self) -> str:
        return self._names["bold"]

    def font_name(self, face: str) -> str:
        try:
            return self._names[face]
        except KeyError:
            raise UnknownFontError(f"unknown font face {face!r}; expected one of {FACES}") from None

    def measure(self, text: str, face: str, size: float) -> float:
        return pdfmetrics.stringWidth(text, self.font_name(face), size)

    def missing_glyphs(self, text: str) -> str:
        """Characters of text that either face cannot draw, in first-seen order."""
        missing = []
        for name in (self.regular, self.bold):
            for ch in _missing_glyphs(name, text):
                if ch not in missing:
                    missing.append(ch)
        return "".join(missing)

    def __repr__(self) -> str:
        return f"FontSet(regular={self.regular!r}, bold={self.bold!r})"


def _missing_glyphs(font_name: str, text: str) -> List[str]:
    font = pdfmetrics.getFont(font_name)
    char_to_glyph = getattr(font.face, "charToGlyph", None)
    if char_to_glyph is not None:
        return [ch for ch in text if ord(ch) not in char_to_glyph]
    # base fonts draw through WinAnsiEncoding, which is cp1252
    missing = []
    for ch in text:
        try:
            ch.encode("cp1252")
        except UnicodeEncodeError:
            missing.append(ch)
    return missing


def _register_ttf(path: Union[str, Path]) -> str:
    p = resource_path(path).resolve()
    if not p.exists():
        raise FontResourceError(f"font file not found: {p}")
    # one registered name per font file
    digest = hashlib.sha1(str(p).encode("utf-8")).hexdigest()[:10]
    name = f"{p.stem}-{digest}"
    if name in pdfmetrics.getRegisteredFontNames():
        return name
    try:
        pdfmetrics.registerFont(TTFont(name, str(p)))
    except Exception as e:
        raise FontResourceError(f"could not load font {p}: {e}") from e
    logger.debug("Registered font %s from %s", name, p)
    return name


@lru_cache(maxsize=None)
def load_fonts(regular_path: Optional[str] = None, bold_path: Optional[str] = None) -> FontSet:
    """Return the (regular, bold) font set, loading font data once per path pair.

    Without paths the PDF base fonts Helvetica/Helvetica-Bold are used.
    Raises FontResourceError when a font cannot be loaded.
    """
    regular = _register_ttf(regular_path) if regular_path else "Helvetica"
    bold = _register_ttf(bold_path) if bold_path else "Helvetica-Bold"
    for name in (regular, bold):
        try:
            pdfmetrics.getFont(name)
        except KeyError as e:
            raise FontResourceError(f"font {name!r} is not available") from e
    return FontSet(regular, bold)


# ===== Draw options and commands =====
@dataclass(frozen=True)
class TextStyle:
    font: str = "regular"
    size: float = 10
    color: Color = field(default_factory=lambda: colors.black)


@dataclass(frozen=True)
class TextCommand:
    text: str
    x: float
    y: float
    font_name: str
    size: float
    color: Color

    def render(self, c: Canvas) -> None:
        c.setFillColor(self.color)
        c.setFont(self.font_name, self.size)
        c.drawString(self.x, self.y, self.text)


@dataclass(frozen=True)
class LineCommand:
    start: Point
    end: Point
    thickness: float
    color: Color

    def render(self, c: Canvas) -> None:
        c.setStrokeColor(self.color)
        c.setLineWidth(self.thickness)
        c.line(self.start[0], self.start[1], self.end[0], self.end[1])


@dataclass(frozen=True)
class RectCommand:
    x: float
    y: float
    width: float
    height: float
    color: Color

    def render(self, c: Canvas) -> None:
        c.setFillColor(self.color)
        c.rect(self.x, self.y, self.width, self.height, stroke=0, fill=1)


DrawCommand = Union[TextCommand, LineCommand, RectCommand]


@dataclass
class Cursor:
    """Next writable position inside the page's content region."""

    x: float
    y: float


# ===== Page =====
class Page:
    """A fixed-size drawing surface, origin at the bottom-left, units in points.

    Draw calls are recorded in order and replayed by the document when it is
    serialized. Once closed, a page rejects further drawing.
    """

    def __init__(self, fonts: FontSet, size: Tuple[float, float] = PAGE_SIZE, number: int = 1,
                 cursor: Optional[Cursor] = None) -> None:
        width, height = size
        if width <= 0 or height <= 0:
            raise ValueError(f"page dimensions must be positive, got {width}x{height}")
        self.fonts = fonts
        self.width = float(width)
        self.height = float(height)
        self.number = number
        self.cursor = cursor if cursor is not None else Cursor(0.0, self.height)
        self._commands: List[DrawCommand] = []
        self._closed = False

    @property
    def commands(self) -> Tuple[DrawCommand, ...]:
        return tuple(self._commands)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def _append(self, cmd: DrawCommand) -> None:
        if self._closed:
            raise PageClosedError(f"page {self.number} is closed")
        self._commands.append(cmd)

    # --- metrics ---
    def measure_text_width(self, text: str, font: str = "regular", size: float = 10) -> float:
        return self.fonts.measure(text, font, size)

    def fit_text(self, text: str, max_width: float, style: TextStyle = TextStyle()) -> str:
        """Collapse whitespace to one line and truncate with an ellipsis to max_width."""
        s = " ".join(str(text or "").split())
        width = self.measure_text_width
        if width(s, style.font, style.size) <= max_width:
            return s
        # longest prefix that still fits with the ellipsis; widths grow with length
        lo, hi = 0, len(s)
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if width(s[:mid] + ELLIPSIS, style.font, style.size) <= max_width:
                lo = mid
            else:
                hi = mid - 1
        s = s[:lo].rstrip()
        return (s + ELLIPSIS) if s else ELLIPSIS

    # --- primitives ---
    def draw_text(self, text: str, x: float, y: float, style: TextStyle = TextStyle()) -> None:
        """Place the baseline of text at (x, y). No wrapping is done."""
        font_name = self.fonts.font_name(style.font)
        self._append(TextCommand(str(text), float(x), float(y), font_name, float(style.size), style.color))

    def draw_text_right(self, text: str, right_x: float, y: float, style: TextStyle = TextStyle()) -> None:
        w = self.measure_text_width(str(text), style.font, style.size)
        self.draw_text(text, right_x - w, y, style)

    def draw_line(self, start: Point, end: Point, thickness: float = 0.5, color: Color = colors.black) -> None:
        self._append(LineCommand((float(start[0]), float(start[1])), (float(end[0]), float(end[1])),
                                 float(thickness), color))

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Color = colors.black) -> None:
        self._append(RectCommand(float(x), float(y), float(w), float(h), color))

    # --- cursor ---
    def move_down(self, dy: float) -> float:
        if self._closed:
            raise PageClosedError(f"page {self.number} is closed")
        self.cursor.y -= dy
        return self.cursor.y

    def render(self, c: Canvas) -> None:
        for cmd in self._commands:
            cmd.render(c)
