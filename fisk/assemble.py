# File: fisk/assemble.py
"""
Gradnja postavitve računa
=========================
• assemble_invoice()  → Document za račun (predloga FULL ali COMPACT)
• assemble_exempt()   → Document za periodično poročilo o oprostitvah

Both templates share one code path; :class:`TemplateConfig` holds everything
that differs between them.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Callable, Sequence

from fisk.clients import Client
from fisk.config import SellerConfig
from fisk.exempt import ExemptSummary
from fisk.layout import (
    BODY,
    BODY_RIGHT,
    CAPTION,
    CAPTION_RIGHT,
    TITLE,
    Document,
    DocumentBuilder,
    Table,
    TextStyle,
)
from fisk.model import InvoiceRequest, InvoiceResponse, LineItem
from fisk.parsing.codes import PAYMENT_TYPE_LABELS
from fisk.parsing.money import fmt_amount, fmt_percent
from fisk.parsing.utils import format_date
from fisk.tax import (
    DocumentTotals,
    LineAmounts,
    compute_line,
    declared_totals,
    exemption_note,
    find_client,
    rate_exemption_note,
    rebate_totals,
)
from fisk.verify import Environment

DASHES = "-" * 83
FOOTER_LINES = (
    "U slucaju ne placanja u dogovorenom roku obracunava se zatezna kamata.",
    "U slucaju spora nadlezan je Privredni sud Podgorica",
)
STAMP = "M.P. _________________________"


@dataclass(frozen=True)
class RenderContext:
    """Everything one invoice render needs, assembled once per call."""

    request: InvoiceRequest
    response: InvoiceResponse
    seller: SellerConfig
    clients: Sequence[Client] = ()
    environment: Environment = Environment.TEST
    internal_number: str = ""
    qr_png: bytes = b""


# ───────────────────────────── stolpci ─────────────────────────────
CellFn = Callable[[int, LineItem, LineAmounts], str]


def _declared_or(value: Decimal | None, fallback: Decimal) -> str:
    return fmt_amount(value if value is not None else fallback)


COLUMNS: dict[str, tuple[str, CellFn]] = {
    "rb": ("Rb", lambda i, it, a: str(i)),
    "name": ("NAZIV PROIZVODA/USLUGE", lambda i, it, a: it.name),
    "unit": ("JM", lambda i, it, a: it.unit),
    "quantity": ("Kolicina", lambda i, it, a: fmt_amount(it.quantity)),
    "upb": ("Cijena bez PDV", lambda i, it, a: fmt_amount(it.unit_price_before_vat)),
    "pb": ("Vrijednost bez PDV", lambda i, it, a: fmt_amount(a.price_before_vat)),
    "rebate": ("Rabat %", lambda i, it, a: fmt_percent(it.rebate)),
    "vat_rate": ("PDV Stopa", lambda i, it, a: fmt_percent(it.vat_rate)),
    "vat_amount": ("PDV Iznos", lambda i, it, a: fmt_amount(a.vat_amount)),
    "upa": ("Cijena sa PDV", lambda i, it, a: fmt_amount(a.unit_price_after_vat)),
    "pa": ("Vrijednost sa PDV", lambda i, it, a: fmt_amount(a.price_after_vat)),
    "upa_declared": (
        "Cijena sa PDV",
        lambda i, it, a: _declared_or(it.unit_price_after_vat, a.unit_price_after_vat),
    ),
    "pa_declared": (
        "Vrijednost sa PDV",
        lambda i, it, a: _declared_or(it.price_after_vat, a.price_after_vat),
    ),
}


# ──────────────────────────── predloge ────────────────────────────
class TemplateVariant(str, Enum):
    FULL = "full"
    COMPACT = "compact"


@dataclass(frozen=True)
class TemplateConfig:
    columns: tuple[str, ...]
    grid_sizes: tuple[int, ...]
    title: TextStyle = TITLE
    # phone and fax rows in the seller header
    contact_rows: bool = True
    # recompute the rebate breakdown instead of echoing declared totals
    rebate_breakdown: bool = True
    # exemption notice from item codes, otherwise from the document VAT rate
    note_from_items: bool = True
    # rate printed in the totals labels; None uses the document VAT rate
    label_rate: Decimal | None = Decimal("21")
    table_size: float = 6
    footer: tuple[str, ...] = field(default=FOOTER_LINES)


TEMPLATES: dict[TemplateVariant, TemplateConfig] = {
    TemplateVariant.FULL: TemplateConfig(
        columns=(
            "rb", "name", "unit", "quantity", "upb", "pb",
            "rebate", "vat_rate", "vat_amount", "upa", "pa",
        ),
        grid_sizes=(1, 2, 1, 1, 1, 1, 1, 1, 1, 1, 1),
    ),
    TemplateVariant.COMPACT: TemplateConfig(
        columns=(
            "rb", "name", "unit", "quantity", "upb",
            "vat_rate", "upa_declared", "pa_declared",
        ),
        grid_sizes=(1, 4, 1, 1, 1, 1, 1, 2),
        title=TextStyle(size=16, bold=True, extrapolate=False),
        contact_rows=False,
        rebate_breakdown=False,
        note_from_items=False,
        label_rate=None,
        table_size=7,
    ),
}


# ───────────────────────────── bloki ─────────────────────────────
def _labelled(label: str, value: str) -> str:
    return " ".join([label, value])


def _seller_header(
    b: DocumentBuilder,
    title: str,
    address: str,
    tin: str,
    seller: SellerConfig,
    style: TextStyle,
    contact_rows: bool,
) -> None:
    with b.row(20):
        with b.col(12):
            b.text(title, style)
    with b.row(4):
        with b.col(6):
            b.text(address)
        with b.col(6):
            b.text(_labelled("PIB:", tin))
    if contact_rows:
        with b.row(4):
            with b.col(6):
                b.text(_labelled("Tel:", seller.phone))
            with b.col(6):
                b.text(_labelled("PDV:", seller.vat))
        with b.row(4):
            with b.col(6):
                b.text(_labelled("Fax:", seller.fax))
            with b.col(6):
                b.text(_labelled("Z.R.:", seller.bank_account))
    else:
        with b.row(4):
            with b.col(6):
                b.text(_labelled("PDV:", seller.vat))
            with b.col(6):
                b.text(_labelled("Z.R.:", seller.bank_account))
    b.line(6)


def _two_columns(b: DocumentBuilder, left, right) -> None:
    """Row with a left and right half; each side is ``(text, style)``."""
    with b.row(4):
        with b.col(6):
            b.text(*left)
        with b.col(6):
            b.text(*right)


def _invoice_details(b: DocumentBuilder, ctx: RenderContext) -> None:
    inv = ctx.request.invoice
    client = find_client(ctx.clients, inv.buyer.tin)

    _two_columns(
        b,
        (_labelled("Broj racuna:", inv.number), CAPTION),
        ("KUPAC", CAPTION),
    )
    _two_columns(
        b,
        (_labelled("Interni br:", ctx.internal_number), CAPTION),
        (inv.buyer.name, CAPTION),
    )
    _two_columns(
        b,
        (_labelled("Datum prometa dobara:", format_date(inv.issue_datetime)), BODY),
        (_labelled("Adresa:", inv.buyer.full_address), BODY),
    )
    _two_columns(
        b,
        (_labelled("Valuta:", inv.currency_code), BODY),
        (_labelled("PIB:", inv.buyer.tin), BODY),
    )
    _two_columns(
        b,
        (_labelled("Nacin placanja:", PAYMENT_TYPE_LABELS.get(inv.payment_type, "")), BODY),
        (_labelled("PDV:", client.vat), BODY),
    )
    b.line(4)


def _items_table(ctx: RenderContext, cfg: TemplateConfig) -> Table:
    cells = [COLUMNS[key] for key in cfg.columns]
    rows = []
    for idx, it in enumerate(ctx.request.invoice.items, start=1):
        amounts = compute_line(it)
        rows.append(tuple(fn(idx, it, amounts) for _, fn in cells))
    return Table(
        header=tuple(label for label, _ in cells),
        rows=tuple(rows),
        grid_sizes=cfg.grid_sizes,
        size=cfg.table_size,
    )


def _summary_line(b: DocumentBuilder, label: str, value: str, style=BODY_RIGHT) -> None:
    with b.row(4):
        with b.col(6):
            b.text(label, style)
        with b.col(6):
            b.text(value, style)


def _summary(
    b: DocumentBuilder, ctx: RenderContext, totals: DocumentTotals, cfg: TemplateConfig
) -> None:
    rate = fmt_percent(cfg.label_rate if cfg.label_rate is not None else totals.vat_rate)
    with b.row(32):
        with b.col(2):
            if ctx.qr_png:
                b.image(base64.b64encode(ctx.qr_png).decode("ascii"))
        b.col_space(4)
        with b.col(6):
            _summary_line(b, "Vrijednost bez PDV:", fmt_amount(totals.price_before_vat))
            _summary_line(b, "Iznos rabata:", fmt_amount(totals.rebate))
            with b.row(4):
                with b.col(12):
                    b.text(DASHES, BODY_RIGHT)
            _summary_line(b, f"Osnovica za stopu {rate}:", fmt_amount(totals.base))
            _summary_line(b, f"PDV po stopi {rate}:", fmt_amount(totals.vat_amount))
            with b.row(4):
                with b.col(12):
                    b.text(DASHES, BODY_RIGHT)
            _summary_line(
                b, "IZNOS ZA UPLATU:", fmt_amount(totals.total_price), CAPTION_RIGHT
            )


def _codes(b: DocumentBuilder, ctx: RenderContext) -> None:
    b.space(4)
    with b.row(4):
        with b.col(1):
            b.text("JIKR:")
        with b.col(11):
            b.text(ctx.response.fic)
    with b.row(4):
        with b.col(1):
            b.text("IKOF:")
        with b.col(11):
            b.text(ctx.request.invoice.iic, TextStyle(extrapolate=False))


def _notes(b: DocumentBuilder, note: str, cfg: TemplateConfig) -> None:
    b.space(4)
    with b.row(4):
        with b.col(6):
            b.text("NAPOMENA:", CAPTION)
    if note:
        with b.row(4):
            with b.col(12):
                b.text(note)
        b.space(2)
    for line in cfg.footer:
        with b.row(4):
            with b.col(12):
                b.text(line)
    with b.row(4):
        b.col_space(6)
        with b.col(6):
            b.text(STAMP, BODY_RIGHT)


# ─────────────────────────── javni vmesnik ───────────────────────────
def assemble_invoice(
    ctx: RenderContext, variant: TemplateVariant = TemplateVariant.FULL
) -> Document:
    """Build the layout tree of an invoice for ``variant``."""
    cfg = TEMPLATES[TemplateVariant(variant)]
    inv = ctx.request.invoice

    if cfg.rebate_breakdown:
        totals = rebate_totals(inv)
    else:
        totals = declared_totals(inv)
    if cfg.note_from_items:
        note = exemption_note(inv.items)
    else:
        note = rate_exemption_note(inv.vat_rate)

    b = DocumentBuilder()
    _seller_header(
        b,
        inv.seller.name,
        inv.seller.address,
        inv.seller.tin,
        ctx.seller,
        cfg.title,
        cfg.contact_rows,
    )
    _invoice_details(b, ctx)
    b.table(_items_table(ctx, cfg))
    b.line(0)
    b.space(4)
    _summary(b, ctx, totals, cfg)
    _codes(b, ctx)
    _notes(b, note, cfg)
    return b.build()


def assemble_exempt(
    seller: SellerConfig,
    period_from: date,
    period_to: date,
    summary: ExemptSummary,
) -> Document:
    """Build the periodic exemption report (no line table)."""
    b = DocumentBuilder()
    _seller_header(
        b, seller.name, seller.address, seller.tin, seller, TITLE, True
    )

    period = " - ".join([period_from.strftime("%Y-%m-%d"), period_to.strftime("%Y-%m-%d")])
    with b.row(4):
        with b.col(6):
            b.text(_labelled("IZVESTAJ ZA PERIOD:", period))
    b.space(5)

    lines = [
        ("Koliko ukupno faktura:", str(summary.count), BODY),
        ("Koliko osnovica prije rabata:", fmt_amount(summary.base_before_rebate), BODY),
        ("Koliko rabat:", fmt_amount(summary.rebate), BODY),
        ("Koliko osnovica posle rabata:", fmt_amount(summary.base_after_rebate), BODY),
        ("Koliko PDV:", fmt_amount(summary.vat_amount), BODY),
        ("Koliko ukupno sa PDV:", fmt_amount(summary.total), CAPTION),
    ]
    with b.row(32):
        with b.col(6):
            for label, value, style in lines:
                with b.row(4):
                    with b.col(6):
                        b.text(label, style)
                    with b.col(6):
                        b.text(value, style)
        b.col_space(6)
    return b.build()
