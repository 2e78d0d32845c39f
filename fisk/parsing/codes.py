"""Enumerations for fiscal codes used in parsing and display."""

from enum import Enum


class PaymentType(str, Enum):
    """Invoice type (``TypeOfInv``)."""

    CASH = "CASH"
    NONCASH = "NONCASH"


class ExemptionCode(str, Enum):
    """Articles of the VAT law under which a line is taxed at 0%."""

    CL17 = "CL17"
    CL20 = "CL20"
    CL26 = "CL26"
    CL27 = "CL27"
    CL28 = "CL28"
    CL29 = "CL29"
    CL30 = "CL30"

    @classmethod
    def lookup(cls, value: str | None) -> "ExemptionCode | None":
        """Return the member for ``value`` or ``None`` if unrecognized."""
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


PAYMENT_TYPE_LABELS: dict[PaymentType, str] = {
    PaymentType.CASH: "Gotovinski",
    PaymentType.NONCASH: "Bezgotovinski",
}


def _article_note(article: int) -> str:
    return f"PDV obracunat po stopi 0% u skladu sa Clanom {article}. Zakona o PDV-u"


EXEMPTION_NOTES: dict[ExemptionCode, str] = {
    code: _article_note(int(code.value[2:])) for code in ExemptionCode
}
