"""Utilities for recomputing line amounts and invoice totals.

All arithmetic is done on :class:`~decimal.Decimal` values without
intermediate rounding; amounts are rounded to two decimals only when they
are formatted for display (see :func:`fisk.parsing.money.fmt_amount`).

The payable total printed on an invoice is always the declared ``TotPrice``.
The figures computed here only make up the breakdown shown above it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from fisk.clients import Client
from fisk.constants import TOTALS_TOLERANCE
from fisk.model import Invoice, LineItem
from fisk.parsing.codes import EXEMPTION_NOTES, ExemptionCode

log = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LineAmounts:
    """Derived amounts for a single line item."""

    price_before_vat: Decimal
    rebated_unit_price: Decimal
    base_after_rebate: Decimal
    unit_vat: Decimal
    vat_amount: Decimal
    unit_price_after_vat: Decimal
    price_after_vat: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    """Totals block of an invoice.

    ``rebate`` is already in display form (negative when non-zero).
    """

    price_before_vat: Decimal
    rebate: Decimal
    base: Decimal
    vat_amount: Decimal
    vat_rate: Decimal
    total_price: Decimal


def compute_line(item: LineItem) -> LineAmounts:
    """Recompute rebate, VAT base, VAT amount and post-VAT price of ``item``."""
    upb = item.unit_price_before_vat
    q = item.quantity

    rebated = upb * (1 - item.rebate / HUNDRED)
    base = rebated * q
    unit_vat = rebated * (item.vat_rate / HUNDRED)
    vat = unit_vat * q

    return LineAmounts(
        price_before_vat=upb * q,
        rebated_unit_price=rebated,
        base_after_rebate=base,
        unit_vat=unit_vat,
        vat_amount=vat,
        unit_price_after_vat=rebated + unit_vat,
        price_after_vat=base + vat,
    )


def rebate_totals(invoice: Invoice) -> DocumentTotals:
    """Aggregate the rebate breakdown shown by the full invoice template.

    The rebate of each line is taken as a percentage of the running
    subtotal, and VAT is accumulated on the running subtotal less the
    running rebate.  These are the figures printed on issued invoices, so
    the order of accumulation must stay as it is.
    """
    subtotal = ZERO
    rebate = ZERO
    vat = ZERO
    for it in invoice.items:
        subtotal += it.quantity * it.unit_price_before_vat
        rebate += subtotal * (it.rebate / HUNDRED)
        vat += (subtotal - rebate) * (it.vat_rate / HUNDRED)

    base = subtotal - rebate
    _reconcile(invoice, base + vat)
    if rebate != 0:
        rebate = -rebate

    return DocumentTotals(
        price_before_vat=subtotal,
        rebate=rebate,
        base=base,
        vat_amount=vat,
        vat_rate=invoice.vat_rate,
        total_price=invoice.total_price,
    )


def declared_totals(invoice: Invoice) -> DocumentTotals:
    """Totals exactly as declared in the request; rebate is always zero."""
    return DocumentTotals(
        price_before_vat=invoice.total_price_wo_vat,
        rebate=ZERO,
        base=invoice.total_price_wo_vat,
        vat_amount=invoice.total_vat_amount,
        vat_rate=invoice.vat_rate,
        total_price=invoice.total_price,
    )


def _reconcile(invoice: Invoice, computed_total: Decimal) -> bool:
    """Log when the recomputed gross differs from the declared ``TotPrice``."""
    diff = abs(computed_total - invoice.total_price)
    if diff > TOTALS_TOLERANCE:
        log.warning(
            "Invoice %s total mismatch: TotPrice %s vs calculated %s",
            invoice.number,
            invoice.total_price,
            computed_total,
        )
        return False
    return True


def exemption_note(items: Iterable[LineItem]) -> str:
    """Return the legal notice for the last recognized exemption code.

    Every item is visited and a later match replaces an earlier one.  An
    empty string means no notice is printed.
    """
    note = ""
    for it in items:
        text = EXEMPTION_NOTES.get(it.exemption) if it.exemption else None
        if text is None:
            continue
        note = text
    return note


def rate_exemption_note(vat_rate: Decimal) -> str:
    """Article 17 notice used when the document-wide VAT rate is zero."""
    if vat_rate == 0:
        return EXEMPTION_NOTES[ExemptionCode.CL17]
    return ""


def find_client(clients: Sequence[Client], tin: str) -> Client:
    """First client with matching ``tin`` or an empty placeholder."""
    for client in clients:
        if client.tin == tin:
            return client
    return Client()
