# pdf_canvas.py
from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from reportlab.graphics import renderPDF
from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle
from svglib.svglib import svg2rlg

logger = logging.getLogger(__name__)

DEFAULT_MARGIN = 36
LINE_SPACING = 1.2


class RenderError(RuntimeError):
    pass


# -----------------------------
# Fonts
# -----------------------------
@dataclass(frozen=True)
class BuiltinFont:
    name: str = "Helvetica"


@dataclass
class EmbeddedFamily:
    """A TrueType family: style ("normal", "bold", "italic", "bold_italic") -> .ttf path."""
    name: str
    styles: dict = field(default_factory=dict)


_BUILTIN_BOLD = {
    "Helvetica": "Helvetica-Bold",
    "Courier": "Courier-Bold",
    "Times-Roman": "Times-Bold",
}

_FAMILY_ARGS = {
    "normal": "normal",
    "bold": "bold",
    "italic": "italic",
    "bold_italic": "boldItalic",
}


def coerce_font(value) -> BuiltinFont | EmbeddedFamily:
    """
    "Courier" -> BuiltinFont("Courier")
    {"Museo Sans": {"normal": "...ttf", "bold": "...ttf"}} -> EmbeddedFamily for the first family
    """
    if isinstance(value, (BuiltinFont, EmbeddedFamily)):
        return value
    if isinstance(value, str):
        return BuiltinFont(value)
    if isinstance(value, dict) and value:
        name, styles = next(iter(value.items()))
        return EmbeddedFamily(name, dict(styles))
    raise TypeError(f"Font must be a name or a {{family: {{style: path}}}} mapping, got {value!r}")


def _register_family(family: EmbeddedFamily) -> tuple[str, str]:
    faces = {}
    for style, path in family.styles.items():
        style = str(style).lower()
        if style not in _FAMILY_ARGS:
            raise RenderError(f"Unknown font style {style!r} for family {family.name!r}")
        face = family.name if style == "normal" else f"{family.name}-{style}"
        try:
            pdfmetrics.registerFont(TTFont(face, str(path)))
        except (OSError, TTFError) as exc:
            raise RenderError(f"Could not load font file {path}: {exc}") from exc
        faces[_FAMILY_ARGS[style]] = face
        logger.debug("registered font face %s from %s", face, path)

    if "normal" not in faces:
        raise RenderError(f"Font family {family.name!r} needs a 'normal' style")

    normal = faces["normal"]
    bold = faces.get("bold", normal)
    pdfmetrics.registerFontFamily(
        family.name,
        normal=normal,
        bold=bold,
        italic=faces.get("italic", normal),
        boldItalic=faces.get("boldItalic", bold),
    )
    return normal, bold


# -----------------------------
# Text helpers
# -----------------------------
def _longest_fit(token, font, size, max_width):
    """Length of the longest prefix of `token` that fits in max_width, never less than 1."""
    lo, hi = 1, len(token)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if stringWidth(token[:mid], font, size) <= max_width:
            lo = mid
        else:
            hi = mid - 1
    return lo


def _word_pieces(word, font, size, max_width):
    while len(word) > 1 and stringWidth(word, font, size) > max_width:
        cut = _longest_fit(word, font, size, max_width)
        yield word[:cut]
        word = word[cut:]
    yield word


def wrap_text(text, font, size, max_width) -> list[str]:
    """
    Break text into lines no wider than max_width.

    Hard line breaks are kept (a blank line stays blank). A word wider than the
    line, like a long email or URL, is cut into chunks that fit.
    """
    lines = []
    for paragraph in str(text).splitlines() or [""]:
        current = ""
        for word in paragraph.split():
            for piece in _word_pieces(word, font, size, max_width):
                candidate = f"{current} {piece}" if current else piece
                if current and stringWidth(candidate, font, size) > max_width:
                    lines.append(current)
                    current = piece
                else:
                    current = candidate
        lines.append(current)
    return lines


def _scaled_size(natural_w, natural_h, width=None, height=None):
    # one side given keeps the aspect ratio; both given stretches
    if width and height:
        return float(width), float(height)
    if width:
        return float(width), natural_h * float(width) / natural_w
    if height:
        return natural_w * float(height) / natural_h, float(height)
    return float(natural_w), float(natural_h)


# -----------------------------
# Geometry
# -----------------------------
@dataclass(frozen=True)
class Bounds:
    """Absolute page rectangle, in points."""
    left: float
    bottom: float
    width: float
    height: float

    @property
    def top(self) -> float:
        return self.bottom + self.height


class _PagedCanvas(canvas.Canvas):
    """
    Holds finished pages back until save() so "page N of M" labels can be stamped
    once M is known.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._page_states = []
        self.page_label = None

    def showPage(self):
        self._page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        label = self.page_label
        self._page_states.append(dict(self.__dict__))
        total = len(self._page_states)
        for number, state in enumerate(self._page_states, start=1):
            self.__dict__.update(state)
            if label:
                fmt, x, y, font, size = label
                text = fmt.replace("<page>", str(number)).replace("<total>", str(total))
                self.setFont(font, size)
                self.setFillColor(colors.black)
                self.drawString(x, y - size, text)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)


# -----------------------------
# Canvas
# -----------------------------
class PdfCanvas:
    """
    Flowing drawing surface over a reportlab canvas.

    Positions handed in and out (`cursor`, `at=` points) are relative to the
    current bounds' bottom-left corner, like a cursor moving down a page.
    """

    def __init__(self, page_size=LETTER, margin: float = DEFAULT_MARGIN):
        self.page_size = page_size
        self._buffer = io.BytesIO()
        # invariant=1 keeps dates/ids out of the output so renders are byte-identical
        self._canvas = _PagedCanvas(self._buffer, pagesize=page_size, invariant=1)
        page_w, page_h = page_size
        self._bounds_stack = [Bounds(margin, margin, page_w - 2 * margin, page_h - 2 * margin)]
        self._y = self.bounds.top
        self._data: bytes | None = None

        self.page_count = 1
        self.font_name = "Helvetica"
        self.bold_font_name = "Helvetica-Bold"
        self.font_size = 12

    # ---- fonts ----
    def set_font(self, font) -> None:
        font = coerce_font(font)
        if isinstance(font, EmbeddedFamily):
            self.font_name, self.bold_font_name = _register_family(font)
            return

        known = set(pdfmetrics.standardFonts) | set(pdfmetrics.getRegisteredFontNames())
        if font.name not in known:
            raise RenderError(f"Unknown built-in font: {font.name!r}")
        self.font_name = font.name
        self.bold_font_name = _BUILTIN_BOLD.get(font.name, font.name)

    def set_font_size(self, size) -> None:
        if size is None or size <= 0:
            raise ValueError(f"Font size must be positive, got {size!r}")
        self.font_size = size

    def leading(self, size=None) -> float:
        return (size or self.font_size) * LINE_SPACING

    # ---- cursor / bounds ----
    @property
    def bounds(self) -> Bounds:
        return self._bounds_stack[-1]

    @property
    def cursor(self) -> float:
        return self._y - self.bounds.bottom

    def move_cursor_to(self, y: float) -> None:
        self._y = self.bounds.bottom + y

    def move_down(self, amount: float) -> None:
        self._y -= amount

    def _at_top(self) -> bool:
        return abs(self._y - self.bounds.top) < 0.01

    def start_new_page(self) -> None:
        self._canvas.showPage()
        self.page_count += 1
        self._y = self.bounds.top
        logger.debug("started page %d", self.page_count)

    @contextmanager
    def floating(self):
        """Draw something without moving the flow: the cursor is put back afterwards."""
        y = self._y
        try:
            yield
        finally:
            self._y = y

    @contextmanager
    def bounding_box(self, at, width: float, height: float | None = None):
        """
        Temporarily draw inside a box whose top-left corner is `at`.

        With a height the parent cursor ends up under the box; without one the
        box stretches down to the parent's bottom and the cursor stays wherever
        the contents left it.
        """
        parent = self.bounds
        x, y = at
        top = parent.bottom + y
        box_height = y if height is None else height
        box = Bounds(parent.left + x, top - box_height, width, box_height)

        self._bounds_stack.append(box)
        self._y = top
        try:
            yield box
        finally:
            self._bounds_stack.pop()
            if height is not None:
                self._y = box.bottom

    # ---- tables ----
    def _make_table(self, rows, col_widths=None, style=(), repeat_rows=0) -> Table:
        cells = [["" if cell is None else str(cell) for cell in row] for row in rows]
        table = Table(cells, colWidths=col_widths, repeatRows=repeat_rows, hAlign="LEFT")
        table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, -1), self.font_name),
            ("FONTSIZE", (0, 0), (-1, -1), self.font_size),
            ("LEADING", (0, 0), (-1, -1), self.leading()),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            *style,
        ]))
        return table

    def measure_column_widths(self, rows, *, horizontal_padding: float = 0, bold_rows=()) -> list[float]:
        """Natural width of each column: its widest line of text plus padding."""
        widths: list[float] = []
        for row_index, row in enumerate(rows):
            font = self.bold_font_name if row_index in bold_rows else self.font_name
            for col, cell in enumerate(row):
                text = "" if cell is None else str(cell)
                width = max(stringWidth(line, font, self.font_size) for line in text.split("\n"))
                width += horizontal_padding
                if col < len(widths):
                    widths[col] = max(widths[col], width)
                else:
                    widths.append(width)
        return widths

    def measure_table(self, rows, *, col_widths=None, style=()) -> tuple[float, float]:
        table = self._make_table(rows, col_widths, style)
        return table.wrapOn(self._canvas, self.bounds.width, self.bounds.height)

    def draw_table(self, rows, *, col_widths=None, style=(), x: float = 0, repeat_rows: int = 0) -> tuple[float, float]:
        """
        Draw a table at the cursor, `x` points in from the left bound, splitting it
        over as many pages as needed. Returns (width, total height drawn).
        """
        table = self._make_table(rows, col_widths, style, repeat_rows)
        left = self.bounds.left + x
        width = height = 0.0

        while True:
            available = self._y - self.bounds.bottom
            w, h = table.wrapOn(self._canvas, self.bounds.width, available)
            width = max(width, w)
            if h <= available:
                table.drawOn(self._canvas, left, self._y - h)
                self._y -= h
                return width, height + h

            parts = table.split(self.bounds.width, available)
            if len(parts) >= 2:
                first, table = parts[0], parts[1]
                _, first_h = first.wrapOn(self._canvas, self.bounds.width, available)
                first.drawOn(self._canvas, left, self._y - first_h)
                height += first_h
                self.start_new_page()
            elif self._at_top():
                # taller than a whole page and can't be split: let it overflow
                table.drawOn(self._canvas, left, self._y - h)
                self._y -= h
                return width, height + h
            else:
                self.start_new_page()

    # ---- text / lines ----
    def _draw_line(self, text, font, size, color, align) -> None:
        bounds = self.bounds
        text_width = stringWidth(text, font, size)
        if align == "center":
            x = bounds.left + (bounds.width - text_width) / 2
        elif align == "right":
            x = bounds.left + bounds.width - text_width
        else:
            x = bounds.left

        self._canvas.setFont(font, size)
        self._canvas.setFillColor(color)
        self._canvas.drawString(x, self._y - pdfmetrics.getAscent(font, size), text)
        self._canvas.setFillColor(colors.black)

    def draw_text(self, text, *, size=None, bold: bool = False, align: str = "left", color=None, rotate: float = 0) -> None:
        """
        Write text at the cursor, wrapped to the bounds and continued on new pages.
        A rotated string is drawn as a single line centered on the bounds.
        """
        size = size or self.font_size
        font = self.bold_font_name if bold else self.font_name
        color = color or colors.black
        leading = self.leading(size)

        if rotate:
            c = self._canvas
            c.saveState()
            c.translate(self.bounds.left + self.bounds.width / 2, self._y - leading / 2)
            c.rotate(rotate)
            c.setFont(font, size)
            c.setFillColor(color)
            c.drawCentredString(0, -size / 3, str(text))
            c.restoreState()
            self._y -= leading
            return

        for line in wrap_text(text, font, size, self.bounds.width):
            if self._y - leading < self.bounds.bottom and not self._at_top():
                self.start_new_page()
            self._draw_line(line, font, size, color, align)
            self._y -= leading

    def stroke_horizontal_rule(self, *, offset: float = 0, line_width: float = 1, color=None) -> None:
        y = self._y - offset
        c = self._canvas
        c.setLineWidth(line_width)
        c.setStrokeColor(color or colors.black)
        c.line(self.bounds.left, y, self.bounds.left + self.bounds.width, y)
        c.setStrokeColor(colors.black)

    # ---- images ----
    def draw_image(self, path, *, at, width=None, height=None) -> float:
        """
        Draw a raster image or an .svg with its top-left corner at `at`.
        Returns the height it was drawn at. Doesn't move the cursor.
        """
        path = Path(path)
        if not path.is_file():
            raise RenderError(f"Image not found: {path}")

        x = self.bounds.left + at[0]
        top = self.bounds.bottom + at[1]

        if path.suffix.lower() == ".svg":
            return self._draw_svg(path, x, top, width, height)

        try:
            image = ImageReader(str(path))
            natural_w, natural_h = image.getSize()
        except Exception as exc:
            # PIL raises several different types for unreadable images
            raise RenderError(f"Could not read image {path}: {exc}") from exc

        w, h = _scaled_size(natural_w, natural_h, width, height)
        self._canvas.drawImage(image, x, top - h, width=w, height=h, mask="auto")
        return h

    def _draw_svg(self, path: Path, x, top, width, height) -> float:
        try:
            drawing = svg2rlg(str(path))
        except Exception as exc:
            raise RenderError(f"Could not read SVG {path}: {exc}") from exc
        if drawing is None or not drawing.width or not drawing.height:
            raise RenderError(f"Could not read SVG {path}")

        w, h = _scaled_size(drawing.width, drawing.height, width, height)
        drawing.scale(w / drawing.width, h / drawing.height)
        drawing.width, drawing.height = w, h
        renderPDF.draw(drawing, self._canvas, x, top - h)
        return h

    # ---- finishing ----
    def number_pages(self, fmt: str, *, at) -> None:
        """Stamp `fmt` ("<page> / <total>") on every page when the document is finalized."""
        self._canvas.page_label = (
            fmt,
            self.bounds.left + at[0],
            self.bounds.bottom + at[1],
            self.font_name,
            self.font_size,
        )

    def finalize_to_bytes(self) -> bytes:
        if self._data is None:
            self._canvas.save()
            self._data = self._buffer.getvalue()
        return self._data

    def finalize_to_file(self, path) -> None:
        data = self.finalize_to_bytes()
        Path(path).write_bytes(data)
