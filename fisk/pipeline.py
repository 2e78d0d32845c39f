"""parse → compute → link → QR → assemble → render, one call per document."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Sequence

from fisk.assemble import (
    RenderContext,
    TemplateVariant,
    assemble_exempt,
    assemble_invoice,
)
from fisk.clients import Client
from fisk.config import SellerConfig
from fisk.exempt import ExemptSummary
from fisk.parsing.efi import parse_request, parse_response
from fisk.parsing.xmlutils import load_document
from fisk.render import render_to_file
from fisk.verify import Environment, build_verification_url, generate_qr_code

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Params:
    """Inputs of :func:`generate_pdf`."""

    seller: SellerConfig
    req_file: Path
    resp_file: Path
    out_file: Path
    clients: Sequence[Client] = field(default_factory=tuple)
    internal_number: str = ""
    environment: Environment | None = None
    variant: TemplateVariant = TemplateVariant.FULL


def build_context(params: Params) -> RenderContext:
    """Parse both documents and derive the QR payload."""
    data = Path(params.req_file).read_bytes()
    request = parse_request(data)
    response = parse_response(Path(params.resp_file))

    environment = params.environment or params.seller.environment
    link = build_verification_url(load_document(data), environment)
    return RenderContext(
        request=request,
        response=response,
        seller=params.seller,
        clients=tuple(params.clients),
        environment=environment,
        internal_number=params.internal_number,
        qr_png=generate_qr_code(link),
    )


def generate_pdf(params: Params) -> Path:
    """Render the invoice described by ``params`` into ``params.out_file``."""
    ctx = build_context(params)
    log.info(
        "Rendering invoice %s (%s, %s)",
        ctx.request.invoice.number,
        TemplateVariant(params.variant).value,
        ctx.environment.value,
    )
    doc = assemble_invoice(ctx, params.variant)
    return render_to_file(doc, params.out_file)


def generate_exempt(
    seller: SellerConfig,
    period_from: date,
    period_to: date,
    summary: ExemptSummary,
    out_file: Path | str,
) -> Path:
    """Render the exemption report for pre-aggregated ``summary``."""
    doc = assemble_exempt(seller, period_from, period_to, summary)
    return render_to_file(doc, out_file)
