# File: fisk/parsing/xmlutils.py
"""
Namespace-agnostic lookups on parsed XML documents.

Signed requests arrive in a SOAP envelope, usually with the fiscal schema as
the default namespace and an ``ds:`` signature next to the payload.  Paths are
therefore written without prefixes (``//Invoice``) and matched by local name.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import Any

from defusedxml import ElementTree as DET
from defusedxml.common import DefusedXmlException
from lxml import etree as LET

from fisk.errors import AttributeNotFound, ElementNotFound, MalformedDocument


XML_PARSER = LET.XMLParser(resolve_entities=False, no_network=True)


def _local_xpath(path: str) -> str:
    """Translate ``//Invoice/Items`` into a ``local-name()`` XPath."""
    if path.startswith("//"):
        prefix, rest = "descendant-or-self::", path[2:]
    elif path.startswith("/"):
        prefix, rest = "/", path[1:]
    else:
        prefix, rest = "./", path
    steps = []
    for part in rest.split("/"):
        if not part:
            raise ValueError(f"unsupported path {path!r}")
        steps.append(f"*[local-name()='{part.split(':')[-1]}']")
    return prefix + "/".join(steps)


def load_document(source: bytes | str | Path | Any) -> LET._ElementTree:
    """Parse ``source`` (bytes, path or file object) into an lxml tree.

    Documents declaring entities are rejected; syntax errors are reported as
    :class:`MalformedDocument`.
    """
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    elif isinstance(source, (str, Path)):
        data = Path(source).read_bytes()
    else:
        data = source.read()

    try:
        DET.fromstring(data)
    except DefusedXmlException as exc:
        raise MalformedDocument(f"forbidden XML construct: {exc!r}") from exc
    except DET.ParseError as exc:
        raise MalformedDocument(f"XML syntax error: {exc}") from exc

    try:
        return LET.parse(io.BytesIO(data), parser=XML_PARSER)
    except LET.XMLSyntaxError as exc:
        raise MalformedDocument(f"XML syntax error: {exc}") from exc


def find_element(path: str, doc) -> LET._Element:
    """Return the first element matching ``path`` in document order."""
    root = doc.getroot() if hasattr(doc, "getroot") else doc
    nodes = root.xpath(_local_xpath(path))
    if not nodes:
        raise ElementNotFound(path)
    return nodes[0]


def value_of_attribute(path: str, attribute: str, doc) -> str:
    """Return attribute ``attribute`` of the first element matching ``path``."""
    elem = find_element(path, doc)
    value = elem.get(attribute)
    if value is None:
        raise AttributeNotFound(path, attribute)
    return value


def element_text(path: str, doc) -> str:
    """Return the stripped text body of the first element matching ``path``."""
    elem = find_element(path, doc)
    return (elem.text or "").strip()
