from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

import pandas as pd

from fisk.model import InvoiceRequest
from fisk.tax import compute_line

log = logging.getLogger(__name__)

COLUMNS = ["racun", "osnovica", "rabat", "osnovica_rabat", "pdv"]


@dataclass(frozen=True)
class ExemptSummary:
    """Pre-aggregated totals printed on the period exemption report."""

    count: int
    base_before_rebate: Decimal
    rebate: Decimal
    base_after_rebate: Decimal
    vat_amount: Decimal
    total: Decimal


def _line_records(request: InvoiceRequest) -> list[dict]:
    inv = request.invoice
    rows = []
    for it in inv.items:
        amounts = compute_line(it)
        rows.append(
            {
                "racun": inv.number,
                "osnovica": amounts.price_before_vat,
                "rabat": amounts.price_before_vat - amounts.base_after_rebate,
                "osnovica_rabat": amounts.base_after_rebate,
                "pdv": amounts.vat_amount,
            }
        )
    return rows


def _dec_sum(series: pd.Series) -> Decimal:
    total = sum(series, Decimal("0"))
    return total if isinstance(total, Decimal) else Decimal(str(total))


def period_table(
    requests: Iterable[InvoiceRequest],
    period_from: date,
    period_to: date,
) -> pd.DataFrame:
    """Per-invoice amounts for invoices issued within the period.

    Both bounds are inclusive and compared on the issue date.  Line amounts
    are recomputed with :func:`fisk.tax.compute_line`; ``rabat`` is the
    difference between the line value before and after the rebate.  The
    number of selected invoices is stored in ``df.attrs["count"]`` (an
    invoice without items has no row).
    """
    selected = [
        r
        for r in requests
        if period_from <= r.invoice.issue_datetime.date() <= period_to
    ]
    log.info(
        "Period %s - %s: %d invoice(s) selected",
        period_from,
        period_to,
        len(selected),
    )

    records = [row for r in selected for row in _line_records(r)]
    df = pd.DataFrame(records, columns=COLUMNS, dtype=object)
    if df.empty:
        grouped = df.copy()
    else:
        grouped = df.groupby("racun", sort=False, as_index=False).agg(
            {
                "osnovica": _dec_sum,
                "rabat": _dec_sum,
                "osnovica_rabat": _dec_sum,
                "pdv": _dec_sum,
            }
        )
    grouped.attrs["count"] = len(selected)
    return grouped


def summary_from_table(df: pd.DataFrame) -> ExemptSummary:
    """Collapse a :func:`period_table` frame into report totals."""
    base_after = _dec_sum(df["osnovica_rabat"])
    vat = _dec_sum(df["pdv"])
    return ExemptSummary(
        count=int(df.attrs.get("count", 0)),
        base_before_rebate=_dec_sum(df["osnovica"]),
        rebate=_dec_sum(df["rabat"]),
        base_after_rebate=base_after,
        vat_amount=vat,
        total=base_after + vat,
    )


def summarize_period(
    requests: Iterable[InvoiceRequest],
    period_from: date,
    period_to: date,
) -> ExemptSummary:
    """Totals for :func:`fisk.assemble.assemble_exempt`."""
    return summary_from_table(period_table(requests, period_from, period_to))
