# File: fisk/parsing/efi.py
# -*- coding: utf-8 -*-
"""
RegisterInvoice (EFI) parser
============================
• parse_request()   → InvoiceRequest iz podpisane ovojnice
• parse_response()  → InvoiceResponse (FIC/JIKR) iz odgovora davčne uprave
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any

from lxml import etree as LET

from fisk.constants import TRACE
from fisk.errors import FieldNotFound, SchemaMismatch
from fisk.model import (
    Invoice,
    InvoiceRequest,
    InvoiceResponse,
    LineItem,
    Party,
    PayMethod,
    SameTax,
)
from fisk.parsing.codes import ExemptionCode, PaymentType
from fisk.parsing.money import parse_decimal
from fisk.parsing.utils import parse_datetime
from fisk.parsing.xmlutils import (
    element_text,
    find_element,
    load_document,
)

log = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def _t(msg, *args):
    if TRACE:
        log.warning("[TRACE PARSE] " + msg, *args)


# ────────────────────────── pomožne funkcije ──────────────────────────
def _children(elem: LET._Element, name: str) -> list[LET._Element]:
    return [
        c
        for c in elem
        if isinstance(c.tag, str) and LET.QName(c).localname == name
    ]


def _child(elem: LET._Element, name: str) -> LET._Element | None:
    found = _children(elem, name)
    return found[0] if found else None


def _attr(elem: LET._Element, name: str) -> str:
    value = elem.get(name)
    if value is None:
        raise SchemaMismatch(
            f"{LET.QName(elem).localname} is missing attribute {name}"
        )
    return value


def _opt(elem: LET._Element, name: str) -> str | None:
    value = elem.get(name)
    return value if value not in (None, "") else None


def _dec(elem: LET._Element, name: str) -> Decimal:
    raw = _attr(elem, name)
    try:
        return parse_decimal(raw)
    except ValueError as exc:
        raise SchemaMismatch(
            f"{LET.QName(elem).localname}@{name}: {exc}"
        ) from None


def _opt_dec(elem: LET._Element, name: str) -> Decimal | None:
    if _opt(elem, name) is None:
        return None
    return _dec(elem, name)


def _datetime(elem: LET._Element, name: str):
    raw = _attr(elem, name)
    try:
        return parse_datetime(raw)
    except ValueError:
        raise SchemaMismatch(
            f"{LET.QName(elem).localname}@{name}: not a datetime {raw!r}"
        ) from None


def _non_negative(value: Decimal, what: str) -> Decimal:
    if value < 0:
        raise SchemaMismatch(f"{what} must not be negative: {value}")
    return value


def _percent(value: Decimal, what: str) -> Decimal:
    if not (0 <= value <= HUNDRED):
        raise SchemaMismatch(f"{what} must be within 0..100: {value}")
    return value


# ───────────────────────────── stranke ─────────────────────────────
def _party(elem: LET._Element | None) -> Party:
    if elem is None:
        return Party()
    return Party(
        name=elem.get("Name", ""),
        tin=elem.get("IDNum", ""),
        address=elem.get("Address", ""),
        town=elem.get("Town", ""),
        country=elem.get("Country", ""),
    )


# ───────────────────────────── postavke ─────────────────────────────
def _line_item(elem: LET._Element, idx: int) -> LineItem:
    what = f"item {idx}"
    ex_raw = _opt(elem, "EX")
    exemption = ExemptionCode.lookup(ex_raw)
    if ex_raw is not None and exemption is None:
        log.warning("Unrecognized exemption code %r on %s", ex_raw, what)

    item = LineItem(
        name=_attr(elem, "N"),
        code=elem.get("C", ""),
        unit=elem.get("U", ""),
        quantity=_non_negative(_dec(elem, "Q"), f"{what} quantity"),
        unit_price_before_vat=_non_negative(
            _dec(elem, "UPB"), f"{what} unit price"
        ),
        unit_price_after_vat=_opt_dec(elem, "UPA"),
        rebate=_percent(_opt_dec(elem, "R") or Decimal("0"), f"{what} rebate"),
        vat_rate=_percent(_opt_dec(elem, "VR") or Decimal("0"), f"{what} VAT rate"),
        price_before_vat=_opt_dec(elem, "PB"),
        vat_amount=_opt_dec(elem, "VA"),
        price_after_vat=_opt_dec(elem, "PA"),
        exemption=exemption,
    )
    _t("item %s: %s q=%s upb=%s r=%s vr=%s", idx, item.name, item.quantity,
       item.unit_price_before_vat, item.rebate, item.vat_rate)
    return item


def _same_taxes(inv: LET._Element) -> tuple[SameTax, ...]:
    group = _child(inv, "SameTaxes")
    if group is None:
        return ()
    out = []
    for st in _children(group, "SameTax"):
        out.append(
            SameTax(
                vat_rate=_percent(
                    _opt_dec(st, "VATRate") or Decimal("0"), "SameTax VAT rate"
                ),
                num_of_items=int(st.get("NumOfItems", "0") or 0),
                price_before_vat=_opt_dec(st, "PriceBefVAT") or Decimal("0"),
                vat_amount=_opt_dec(st, "VATAmt") or Decimal("0"),
            )
        )
    return tuple(out)


def _pay_methods(inv: LET._Element) -> tuple[PayMethod, ...]:
    group = _child(inv, "PayMethods")
    if group is None:
        return ()
    return tuple(
        PayMethod(type=pm.get("Type", ""), amount=_dec(pm, "Amt"))
        for pm in _children(group, "PayMethod")
    )


def _payment_type(inv: LET._Element) -> PaymentType:
    raw = _attr(inv, "TypeOfInv")
    try:
        return PaymentType(raw.strip().upper())
    except ValueError:
        raise SchemaMismatch(f"unknown TypeOfInv {raw!r}") from None


def _invoice(inv: LET._Element) -> Invoice:
    seller_el = _child(inv, "Seller")
    if seller_el is None:
        raise SchemaMismatch("Invoice has no Seller")
    items_el = _child(inv, "Items")
    items = (
        tuple(
            _line_item(el, idx)
            for idx, el in enumerate(_children(items_el, "I"), start=1)
        )
        if items_el is not None
        else ()
    )

    currency_el = _child(inv, "Currency")
    currency = None
    exchange_rate = None
    if currency_el is not None:
        currency = _opt(currency_el, "Code")
        exchange_rate = _opt_dec(currency_el, "ExRate")

    return Invoice(
        number=_attr(inv, "InvNum"),
        order_number=_attr(inv, "InvOrdNum"),
        issue_datetime=_datetime(inv, "IssueDateTime"),
        payment_type=_payment_type(inv),
        iic=_attr(inv, "IIC"),
        business_unit_code=_attr(inv, "BusinUnitCode"),
        tcr_code=_attr(inv, "TCRCode"),
        software_code=_attr(inv, "SoftCode"),
        operator_code=inv.get("OperatorCode", ""),
        seller=_party(seller_el),
        buyer=_party(_child(inv, "Buyer")),
        total_price=_non_negative(_dec(inv, "TotPrice"), "TotPrice"),
        total_price_wo_vat=_non_negative(
            _dec(inv, "TotPriceWoVAT"), "TotPriceWoVAT"
        ),
        total_vat_amount=_non_negative(_dec(inv, "TotVATAmt"), "TotVATAmt"),
        currency=currency,
        exchange_rate=exchange_rate,
        items=items,
        same_taxes=_same_taxes(inv),
        pay_methods=_pay_methods(inv),
    )


# ─────────────────────────── javni vmesnik ───────────────────────────
def parse_request(source: bytes | str | Path | Any) -> InvoiceRequest:
    """Parse a (signed) RegisterInvoiceRequest document.

    ``source`` may be raw bytes, a path, or a file object.  The request
    subtree is located anywhere in the document so SOAP envelopes and the
    enveloped signature are ignored.

    Raises
    ------
    MalformedDocument
        The input is not well-formed XML.
    SchemaMismatch
        ``RegisterInvoiceRequest`` or one of its required parts is missing.
    """
    doc = load_document(source)
    try:
        req = find_element("//RegisterInvoiceRequest", doc)
    except FieldNotFound:
        raise SchemaMismatch("not valid xml. no RegisterInvoiceRequest") from None

    inv = _child(req, "Invoice")
    if inv is None:
        raise SchemaMismatch("RegisterInvoiceRequest has no Invoice")
    header = _child(req, "Header")

    request = InvoiceRequest(
        uuid=header.get("UUID", "") if header is not None else "",
        send_datetime=(
            _datetime(header, "SendDateTime")
            if header is not None and _opt(header, "SendDateTime")
            else None
        ),
        invoice=_invoice(inv),
    )
    log.debug(
        "Parsed request %s: %d items, TotPrice=%s",
        request.invoice.number,
        len(request.invoice.items),
        request.invoice.total_price,
    )
    return request


def parse_response(source: bytes | str | Path | Any) -> InvoiceResponse:
    """Parse the authority's RegisterInvoiceResponse envelope."""
    doc = load_document(source)
    try:
        resp = find_element("//RegisterInvoiceResponse", doc)
        fic = element_text("//RegisterInvoiceResponse/FIC", doc)
    except FieldNotFound as exc:
        raise SchemaMismatch(f"not valid response xml: {exc}") from None
    if not fic:
        raise SchemaMismatch("RegisterInvoiceResponse has an empty FIC")

    header = _child(resp, "Header")
    response = InvoiceResponse(
        fic=fic,
        uuid=header.get("UUID", "") if header is not None else "",
        request_uuid=header.get("RequestUUID", "") if header is not None else "",
        send_datetime=(
            _datetime(header, "SendDateTime")
            if header is not None and _opt(header, "SendDateTime")
            else None
        ),
    )
    log.debug("Parsed response FIC=%s", response.fic)
    return response
