import pytest

from fisk.layout import (
    CAPTION,
    Col,
    ColSpace,
    DocumentBuilder,
    Line,
    PageSetup,
    Row,
    Table,
    Text,
)


def test_rows_and_cols_keep_order():
    b = DocumentBuilder()
    with b.row(4):
        with b.col(6):
            b.text("a")
        b.col_space(6)
    b.line(2)
    with b.row(8):
        with b.col(12):
            b.text("b", CAPTION)
    doc = b.build()

    first, rule, second = doc.elements
    assert isinstance(first, Row) and first.height == 4
    assert isinstance(first.cols[1], ColSpace)
    assert first.cols[0].blocks == [Text("a")]
    assert rule == Line(2)
    assert second.cols[0].blocks[0].style is CAPTION
    assert doc.texts() == ["a", "b"]


def test_nested_rows_live_in_column():
    b = DocumentBuilder()
    with b.row(20):
        with b.col(6):
            with b.row(4):
                with b.col(6):
                    b.text("label")
                with b.col(6):
                    b.text("value")
    doc = b.build()

    assert len(doc.elements) == 1
    outer = doc.elements[0].cols[0]
    assert isinstance(outer, Col)
    assert [c.blocks[0].text for c in outer.rows[0].cols] == ["label", "value"]
    assert doc.texts() == ["label", "value"]


def test_table_texts():
    b = DocumentBuilder()
    b.table(Table(header=("H1", "H2"), rows=(("1", "2"),), grid_sizes=(1, 1)))
    assert b.build().texts() == ["H1", "H2", "1", "2"]


def test_default_page():
    page = DocumentBuilder().build().page
    assert page == PageSetup("portrait", "A4", 10, 15, 10)


def test_text_outside_column():
    b = DocumentBuilder()
    with pytest.raises(RuntimeError):
        b.text("x")
    with b.row(4):
        with pytest.raises(RuntimeError):
            b.text("x")


def test_col_outside_row():
    b = DocumentBuilder()
    with pytest.raises(RuntimeError):
        with b.col(6):
            pass


def test_table_inside_row():
    b = DocumentBuilder()
    with b.row(4):
        with pytest.raises(RuntimeError):
            b.line()


def test_space_is_empty_row():
    b = DocumentBuilder()
    b.space(5)
    assert b.build().elements == [Row(height=5)]
