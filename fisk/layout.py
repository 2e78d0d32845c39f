"""Layout tree handed from the assembler to the renderer.

A :class:`Document` is an ordered list of rows.  Every row spans the full
width of its container, which is split into a 12 unit grid shared by the
row's columns.  Columns hold text and image blocks and may nest rows of
their own; tables and rules sit between rows.  Nothing in here touches the
file system.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Union

GRID = 12


class Align(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class TextStyle:
    size: float = 8
    bold: bool = False
    align: Align = Align.LEFT
    # False wraps the text to the column width
    extrapolate: bool = True


TITLE = TextStyle(size=20, bold=True, extrapolate=False)
BODY = TextStyle()
BODY_RIGHT = TextStyle(align=Align.RIGHT)
CAPTION = TextStyle(bold=True)
CAPTION_RIGHT = TextStyle(bold=True, align=Align.RIGHT)


@dataclass(frozen=True)
class Text:
    text: str
    style: TextStyle = BODY


@dataclass(frozen=True)
class Image:
    """PNG image, base64 encoded."""

    data: str
    percent: float = 100
    center: bool = True


@dataclass(frozen=True)
class Table:
    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    grid_sizes: tuple[int, ...]
    size: float = 6
    align: Align = Align.CENTER
    alternate_background: tuple[int, int, int] | None = (200, 200, 200)
    header_content_space: float = 2


@dataclass
class Col:
    size: int
    blocks: list["Block"] = field(default_factory=list)
    rows: list["Row"] = field(default_factory=list)


@dataclass(frozen=True)
class ColSpace:
    size: int


@dataclass
class Row:
    height: float
    cols: list[Union[Col, ColSpace]] = field(default_factory=list)


@dataclass(frozen=True)
class Line:
    """Horizontal rule taking ``spacing`` mm of vertical space."""

    spacing: float = 0


Block = Union[Text, Image]
Element = Union[Row, Line, Table]


@dataclass(frozen=True)
class PageSetup:
    orientation: str = "portrait"
    size: str = "A4"
    margin_left: float = 10
    margin_top: float = 15
    margin_right: float = 10


@dataclass
class Document:
    page: PageSetup = field(default_factory=PageSetup)
    elements: list[Element] = field(default_factory=list)

    def texts(self) -> list[str]:
        """All text strings in document order, table cells included."""
        out: list[str] = []

        def _blocks(blocks):
            for b in blocks:
                if isinstance(b, Text):
                    out.append(b.text)
                elif isinstance(b, Table):
                    out.extend(b.header)
                    for r in b.rows:
                        out.extend(r)

        def _rows(rows):
            for r in rows:
                for c in r.cols:
                    if isinstance(c, Col):
                        _blocks(c.blocks)
                        _rows(c.rows)

        for el in self.elements:
            if isinstance(el, Row):
                _rows([el])
            elif isinstance(el, Table):
                _blocks([el])
        return out


class DocumentBuilder:
    """Append rows, columns and blocks to a :class:`Document` in order.

    ``row()`` and ``col()`` are context managers; a row opened inside a
    column nests under that column::

        b = DocumentBuilder()
        with b.row(4):
            with b.col(6):
                b.text("PIB: 123")
            b.col_space(6)
    """

    def __init__(self, page: PageSetup | None = None):
        self.document = Document(page=page or PageSetup())
        # open containers, innermost last
        self._stack: list[Row | Col] = []

    @contextmanager
    def row(self, height: float) -> Iterator[Row]:
        row = Row(height=height)
        if not self._stack:
            self.document.elements.append(row)
        elif isinstance(self._stack[-1], Col):
            self._stack[-1].rows.append(row)
        else:
            raise RuntimeError("a nested row must be opened inside a column")
        self._stack.append(row)
        try:
            yield row
        finally:
            self._stack.pop()

    @contextmanager
    def col(self, size: int) -> Iterator[Col]:
        col = Col(size=size)
        self._current_row("col()").cols.append(col)
        self._stack.append(col)
        try:
            yield col
        finally:
            self._stack.pop()

    def col_space(self, size: int) -> None:
        self._current_row("col_space()").cols.append(ColSpace(size=size))

    def _current_row(self, what: str) -> Row:
        if not self._stack or not isinstance(self._stack[-1], Row):
            raise RuntimeError(f"{what} must be called inside a row")
        return self._stack[-1]

    def _block(self, block: Block) -> None:
        if not self._stack or not isinstance(self._stack[-1], Col):
            raise RuntimeError("blocks must be placed inside a column")
        self._stack[-1].blocks.append(block)

    def text(self, text: str, style: TextStyle = BODY) -> None:
        self._block(Text(text=text, style=style))

    def image(self, data: str, percent: float = 100, center: bool = True) -> None:
        self._block(Image(data=data, percent=percent, center=center))

    def space(self, height: float) -> None:
        """Empty row of ``height`` mm."""
        with self.row(height):
            pass

    def line(self, spacing: float = 0) -> None:
        self._top_level("line()").append(Line(spacing=spacing))

    def table(self, table: Table) -> None:
        self._top_level("table()").append(table)

    def _top_level(self, what: str) -> list[Element]:
        if self._stack:
            raise RuntimeError(f"{what} is only allowed between rows")
        return self.document.elements

    def build(self) -> Document:
        return self.document
