"""Draw a :class:`fisk.layout.Document` onto PDF pages with reportlab."""
from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape, portrait
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from fisk.errors import RenderError
from fisk.layout import (
    GRID,
    Align,
    Col,
    Document,
    Image,
    Line,
    Row,
    Table,
    Text,
    TextStyle,
)

log = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4}
LINE_HEIGHT = 1.2
CELL_PADDING = 1 * mm


def _font(style: TextStyle) -> str:
    return "Helvetica-Bold" if style.bold else "Helvetica"


@dataclass
class _Box:
    x: float
    width: float


class _PageWriter:
    """Keeps the vertical cursor and starts new pages as rows overflow."""

    def __init__(self, c: canvas.Canvas, doc: Document, pagesize):
        self.c = c
        self.page_width, self.page_height = pagesize
        self.left = doc.page.margin_left * mm
        self.top = doc.page.margin_top * mm
        self.right = doc.page.margin_right * mm
        # the bottom margin mirrors the top one
        self.bottom = self.top
        self.y = self.page_height - self.top

    @property
    def content(self) -> _Box:
        return _Box(self.left, self.page_width - self.left - self.right)

    def reserve(self, height: float) -> None:
        if self.y - height < self.bottom:
            self.c.showPage()
            self.y = self.page_height - self.top

    # ─────────────────────────── elementi ───────────────────────────
    def row(self, row: Row, box: _Box, top: float) -> None:
        unit = box.width / GRID
        x = box.x
        for col in row.cols:
            width = col.size * unit
            if isinstance(col, Col):
                self.col(col, _Box(x, width), top, row.height * mm)
            x += width

    def col(self, col: Col, box: _Box, top: float, height: float) -> None:
        y = top
        for block in col.blocks:
            if isinstance(block, Text):
                y = self.text(block, box, y)
            elif isinstance(block, Image):
                self.image(block, box, y, height)
        for nested in col.rows:
            self.row(nested, box, y)
            y -= nested.height * mm

    def text(self, block: Text, box: _Box, top: float) -> float:
        style = block.style
        font = _font(style)
        if style.extrapolate:
            lines = [block.text]
        else:
            lines = simpleSplit(block.text, font, style.size, box.width) or [""]
        self.c.setFont(font, style.size)
        self.c.setFillColor(colors.black)
        y = top - style.size
        for line in lines:
            if style.align == Align.RIGHT:
                self.c.drawRightString(box.x + box.width, y, line)
            elif style.align == Align.CENTER:
                self.c.drawCentredString(box.x + box.width / 2, y, line)
            else:
                self.c.drawString(box.x, y, line)
            y -= style.size * LINE_HEIGHT
        return y

    def image(self, block: Image, box: _Box, top: float, height: float) -> None:
        reader = ImageReader(io.BytesIO(base64.b64decode(block.data)))
        iw, ih = reader.getSize()
        scale = min(box.width / iw, height / ih) * block.percent / 100
        w, h = iw * scale, ih * scale
        x = box.x + (box.width - w) / 2 if block.center else box.x
        y = top - h - ((height - h) / 2 if block.center else 0)
        self.c.drawImage(reader, x, y, width=w, height=h)

    def line(self, line: Line) -> None:
        height = max(line.spacing * mm, 1 * mm)
        self.reserve(height)
        mid = self.y - height / 2
        box = self.content
        self.c.setStrokeColor(colors.black)
        self.c.setLineWidth(0.5)
        self.c.line(box.x, mid, box.x + box.width, mid)
        self.y -= height

    def table(self, table: Table) -> None:
        box = self.content
        total = sum(table.grid_sizes) or 1
        widths = [box.width * g / total for g in table.grid_sizes]

        self._table_row(table.header, widths, table, shade=None)
        self.y -= table.header_content_space * mm
        for idx, cells in enumerate(table.rows):
            shade = table.alternate_background if idx % 2 == 1 else None
            self._table_row(cells, widths, table, shade)

    def _table_row(self, cells, widths, table: Table, shade) -> None:
        font = "Helvetica"
        wrapped = [
            simpleSplit(cell, font, table.size, w - 2 * CELL_PADDING) or [""]
            for cell, w in zip(cells, widths)
        ]
        line_h = table.size * LINE_HEIGHT
        height = max(len(w) for w in wrapped) * line_h + 2 * CELL_PADDING
        self.reserve(height)

        box = self.content
        if shade is not None:
            self.c.setFillColor(colors.Color(*(v / 255 for v in shade)))
            self.c.rect(box.x, self.y - height, box.width, height, stroke=0, fill=1)
        self.c.setFillColor(colors.black)
        self.c.setFont(font, table.size)

        x = box.x
        for lines, w in zip(wrapped, widths):
            y = self.y - CELL_PADDING - table.size
            for line in lines:
                if table.align == Align.CENTER:
                    self.c.drawCentredString(x + w / 2, y, line)
                elif table.align == Align.RIGHT:
                    self.c.drawRightString(x + w - CELL_PADDING, y, line)
                else:
                    self.c.drawString(x + CELL_PADDING, y, line)
                y -= line_h
            x += w
        self.y -= height


def _page_size(doc: Document):
    size = PAGE_SIZES[doc.page.size]
    return landscape(size) if doc.page.orientation == "landscape" else portrait(size)


def render(doc: Document, out) -> None:
    """Draw ``doc`` onto ``out`` (a path or binary file object)."""
    pagesize = _page_size(doc)
    c = canvas.Canvas(out, pagesize=pagesize, invariant=1)
    writer = _PageWriter(c, doc, pagesize)
    for el in doc.elements:
        if isinstance(el, Row):
            height = el.height * mm
            writer.reserve(height)
            writer.row(el, writer.content, writer.y)
            writer.y -= height
        elif isinstance(el, Line):
            writer.line(el)
        elif isinstance(el, Table):
            writer.table(el)
    c.save()


def render_to_file(doc: Document, path: Path | str) -> Path:
    """Render ``doc`` into the PDF file ``path``.

    On failure the partially written file is removed and
    :class:`RenderError` is raised.
    """
    path = Path(path)
    try:
        fh = path.open("wb")
    except OSError as exc:
        raise RenderError(f"cannot open {path}: {exc}") from exc
    try:
        with fh:
            render(doc, fh)
    except Exception as exc:
        path.unlink(missing_ok=True)
        raise RenderError(f"cannot write {path}: {exc}") from exc
    log.info("Wrote %s", path)
    return path
