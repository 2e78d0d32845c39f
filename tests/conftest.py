from pathlib import Path

import pytest

DATA = Path(__file__).parent / "data"


@pytest.fixture
def request_path() -> Path:
    return DATA / "request.xml"


@pytest.fixture
def response_path() -> Path:
    return DATA / "response.xml"


@pytest.fixture
def seller_path() -> Path:
    return DATA / "seller.json"


@pytest.fixture
def clients_path() -> Path:
    return DATA / "clients.csv"


def build_request(
    items: list[dict] | None = None,
    *,
    currency: bool = True,
    vat_rate: str | None = "21",
    issue: str = "2023-05-01T10:00:00+02:00",
    number: str = "BU1/7/2023/TCR1",
    buyer: bool = True,
    invoice_attrs: dict | None = None,
) -> bytes:
    """Minimal RegisterInvoiceRequest without the SOAP envelope."""
    if items is None:
        items = [{"N": "Usluga", "U": "kom", "Q": "1", "UPB": "10.00", "VR": "21"}]
    attrs = {
        "BusinUnitCode": "BU1",
        "IIC": "ABC123",
        "InvNum": number,
        "InvOrdNum": "7",
        "IssueDateTime": issue,
        "SoftCode": "SC1",
        "TCRCode": "TCR1",
        "TotPrice": "12.10",
        "TotPriceWoVAT": "10.00",
        "TotVATAmt": "2.10",
        "TypeOfInv": "CASH",
    }
    attrs.update(invoice_attrs or {})
    attrs = {k: v for k, v in attrs.items() if v is not None}

    def _a(d: dict) -> str:
        return " ".join(f'{k}="{v}"' for k, v in d.items())

    parts = ['<RegisterInvoiceRequest xmlns="https://efi.tax.gov.me/fs/schema">',
             '<Header SendDateTime="2023-05-01T10:00:05+02:00" UUID="u-1"/>',
             f"<Invoice {_a(attrs)}>"]
    if currency:
        parts.append('<Currency Code="USD" ExRate="1.1"/>')
    parts.append('<Seller IDNum="12345678" IDType="TIN" Name="Primjer d.o.o." Address="Bulevar 1"/>')
    if buyer:
        parts.append('<Buyer IDNum="87654321" IDType="TIN" Name="Kupac d.o.o." Address="Njegoseva 10" Town="Niksic"/>')
    parts.append("<Items>")
    parts.extend(f"<I {_a(it)}/>" for it in items)
    parts.append("</Items>")
    if vat_rate is not None:
        parts.append(f'<SameTaxes><SameTax NumOfItems="{len(items)}" VATRate="{vat_rate}"/></SameTaxes>')
    parts.append("</Invoice></RegisterInvoiceRequest>")
    return "".join(parts).encode("utf-8")


@pytest.fixture
def make_request():
    return build_request


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("FISK_CONFIG", "FISK_CLIENTS", "FISK_ENV"):
        monkeypatch.delenv(name, raising=False)
