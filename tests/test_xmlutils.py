import pytest

from fisk.errors import AttributeNotFound, ElementNotFound, MalformedDocument
from fisk.parsing.xmlutils import (
    element_text,
    find_element,
    load_document,
    value_of_attribute,
)


def test_value_of_attribute_ignores_namespaces(request_path):
    doc = load_document(request_path)
    assert value_of_attribute("//Invoice", "IIC", doc) == "ABC123"
    assert value_of_attribute("//Seller", "IDNum", doc) == "12345678"


def test_first_match_in_document_order():
    doc = load_document(b"<r><a x='1'/><b><a x='2'/></b></r>")
    assert value_of_attribute("//a", "x", doc) == "1"
    assert value_of_attribute("//b/a", "x", doc) == "2"


def test_root_element_is_matched():
    doc = load_document(b"<Invoice TotPrice='1.00'/>")
    assert value_of_attribute("//Invoice", "TotPrice", doc) == "1.00"


def test_missing_element():
    doc = load_document(b"<r/>")
    with pytest.raises(ElementNotFound) as exc:
        value_of_attribute("//Invoice", "IIC", doc)
    assert exc.value.path == "//Invoice"


def test_missing_attribute():
    doc = load_document(b"<r><Invoice/></r>")
    with pytest.raises(AttributeNotFound) as exc:
        value_of_attribute("//Invoice", "IIC", doc)
    assert exc.value.attribute == "IIC"


def test_value_is_returned_verbatim():
    doc = load_document(b"<r><Invoice TotPrice='078.650'/></r>")
    assert value_of_attribute("//Invoice", "TotPrice", doc) == "078.650"


def test_element_text(response_path):
    doc = load_document(response_path)
    assert element_text("//FIC", doc) == "2f5d9a7c-1b3e-4d6f-8a0b-c2e4f6a8b0d1"
    assert find_element("//RegisterInvoiceResponse", doc).get("Id") == "Response"


def test_malformed_xml():
    with pytest.raises(MalformedDocument):
        load_document(b"<r><unclosed></r>")


def test_lookup_is_deterministic(request_path):
    doc = load_document(request_path)
    first = value_of_attribute("//Invoice", "IssueDateTime", doc)
    assert all(
        value_of_attribute("//Invoice", "IssueDateTime", doc) == first
        for _ in range(5)
    )
