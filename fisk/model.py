"""In-memory shape of RegisterInvoice requests and responses.

Everything here is built once by :mod:`fisk.parsing.efi` and never mutated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from fisk.constants import DEFAULT_CURRENCY, DEFAULT_VAT_RATE
from fisk.parsing.codes import ExemptionCode, PaymentType


@dataclass(frozen=True)
class Party:
    """Seller or buyer as declared in the request."""

    name: str = ""
    tin: str = ""
    address: str = ""
    town: str = ""
    country: str = ""

    @property
    def full_address(self) -> str:
        """``address, town, country`` without the empty parts."""
        return ", ".join(p for p in (self.address, self.town, self.country) if p)


@dataclass(frozen=True)
class LineItem:
    name: str
    unit: str
    quantity: Decimal
    unit_price_before_vat: Decimal
    vat_rate: Decimal
    rebate: Decimal = Decimal("0")
    code: str = ""
    unit_price_after_vat: Decimal | None = None
    price_before_vat: Decimal | None = None
    vat_amount: Decimal | None = None
    # authority-declared price after VAT
    price_after_vat: Decimal | None = None
    exemption: ExemptionCode | None = None


@dataclass(frozen=True)
class SameTax:
    vat_rate: Decimal
    num_of_items: int = 0
    price_before_vat: Decimal = Decimal("0")
    vat_amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class PayMethod:
    type: str
    amount: Decimal


@dataclass(frozen=True)
class Invoice:
    number: str
    order_number: str
    issue_datetime: datetime
    payment_type: PaymentType
    iic: str
    business_unit_code: str
    tcr_code: str
    software_code: str
    seller: Party
    total_price: Decimal
    total_price_wo_vat: Decimal
    total_vat_amount: Decimal
    buyer: Party = field(default_factory=Party)
    operator_code: str = ""
    currency: str | None = None
    exchange_rate: Decimal | None = None
    items: tuple[LineItem, ...] = ()
    same_taxes: tuple[SameTax, ...] = ()
    pay_methods: tuple[PayMethod, ...] = ()

    @property
    def currency_code(self) -> str:
        return self.currency or DEFAULT_CURRENCY

    @property
    def vat_rate(self) -> Decimal:
        """Document-wide VAT rate from the first same-tax group."""
        if self.same_taxes:
            return self.same_taxes[0].vat_rate
        return DEFAULT_VAT_RATE


@dataclass(frozen=True)
class InvoiceRequest:
    uuid: str
    send_datetime: datetime | None
    invoice: Invoice


@dataclass(frozen=True)
class InvoiceResponse:
    fic: str
    uuid: str = ""
    request_uuid: str = ""
    send_datetime: datetime | None = None
