"""Verification link embedded in the invoice QR code."""
from __future__ import annotations

import io
import logging
from enum import Enum

import qrcode
from PIL import Image
from qrcode.exceptions import DataOverflowError

from fisk.constants import QR_IMAGE_SIZE
from fisk.errors import EncodingError, InvalidEnvironment
from fisk.parsing.xmlutils import value_of_attribute

log = logging.getLogger(__name__)


class Environment(str, Enum):
    TEST = "TEST"
    PRODUCTION = "PRODUCTION"

    @classmethod
    def parse(cls, value: "str | Environment") -> "Environment":
        """Accept ``TEST``/``PRODUCTION`` (``PROD`` too), case-insensitive."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        if key == "PROD":
            key = "PRODUCTION"
        try:
            return cls(key)
        except ValueError:
            raise InvalidEnvironment(f"invalid environment {value!r}") from None


TESTING_VERIFY_URL = (
    "https://efitest.tax.gov.me/ic/#/verify"
    "?iic=%s&tin=%s&crtd=%s&ord=%s&bu=%s&cr=%s&sw=%s&prc=%s"
)
PRODUCTION_VERIFY_URL = (
    "https://mapr.tax.gov.me/ic/#/verify"
    "?iic=%s&tin=%s&crtd=%s&ord=%s&bu=%s&cr=%s&sw=%s&prc=%s"
)

VERIFY_URLS: dict[Environment, str] = {
    Environment.TEST: TESTING_VERIFY_URL,
    Environment.PRODUCTION: PRODUCTION_VERIFY_URL,
}

# (path, attribute) in the order they appear in the link
VERIFY_FIELDS: tuple[tuple[str, str], ...] = (
    ("//Invoice", "IIC"),
    ("//Seller", "IDNum"),
    ("//Invoice", "IssueDateTime"),
    ("//Invoice", "InvOrdNum"),
    ("//Invoice", "BusinUnitCode"),
    ("//Invoice", "TCRCode"),
    ("//Invoice", "SoftCode"),
    ("//Invoice", "TotPrice"),
)


def build_verification_url(doc, environment: "Environment | str") -> str:
    """Return the verification link for the request in ``doc``.

    Values are copied from the XML text verbatim (``TotPrice="12.30"`` stays
    ``12.30``), which is what the verification service signs against.
    Strings go through :meth:`Environment.parse`.
    """
    values = tuple(
        value_of_attribute(path, attr, doc) for path, attr in VERIFY_FIELDS
    )
    template = VERIFY_URLS[Environment.parse(environment)]
    link = template % values
    log.debug("Verification link: %s", link)
    return link


def generate_qr_code(link: str, size: int = QR_IMAGE_SIZE) -> bytes:
    """Encode ``link`` as a PNG QR code at the highest error correction."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(link)
    try:
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        img = img.get_image().convert("L").resize((size, size), Image.NEAREST)
        buf = io.BytesIO()
        img.save(buf, format="PNG")
    except DataOverflowError as exc:
        raise EncodingError(f"link too long for a QR code: {exc}") from exc
    except (OSError, ValueError) as exc:
        raise EncodingError(f"QR image encoding failed: {exc}") from exc
    return buf.getvalue()
