import pytest

from fisk.errors import AttributeNotFound, ElementNotFound, InvalidEnvironment
from fisk.parsing.xmlutils import load_document
from fisk.verify import (
    PRODUCTION_VERIFY_URL,
    TESTING_VERIFY_URL,
    Environment,
    build_verification_url,
)


@pytest.fixture
def doc(make_request):
    return load_document(
        make_request(
            issue="2023-05-01T10:00:00",
            invoice_attrs={"TotPrice": "123.45"},
        )
    )


def test_production_link_field_order(doc):
    assert build_verification_url(doc, Environment.PRODUCTION) == (
        "https://mapr.tax.gov.me/ic/#/verify"
        "?iic=ABC123&tin=12345678&crtd=2023-05-01T10:00:00&ord=7"
        "&bu=BU1&cr=TCR1&sw=SC1&prc=123.45"
    )


def test_test_link_uses_test_host(doc):
    link = build_verification_url(doc, Environment.TEST)
    assert link.startswith("https://efitest.tax.gov.me/ic/#/verify?iic=ABC123&")
    assert "mapr.tax.gov.me" not in link


def test_templates_have_eight_slots():
    assert TESTING_VERIFY_URL.count("%s") == 8
    assert PRODUCTION_VERIFY_URL.count("%s") == 8


def test_values_are_not_normalized(make_request):
    doc = load_document(make_request(invoice_attrs={"TotPrice": "12.30"}))
    assert build_verification_url(doc, Environment.TEST).endswith("&prc=12.30")


def test_signed_envelope(request_path):
    link = build_verification_url(load_document(request_path), Environment.TEST)
    assert "crtd=2023-05-01T10:00:00+02:00" in link
    assert link.endswith("&prc=78.65")


@pytest.mark.parametrize("env", ["staging", "", None])
def test_unknown_environment_is_rejected(doc, env):
    with pytest.raises(InvalidEnvironment):
        build_verification_url(doc, env)


@pytest.mark.parametrize("raw", ["STAGING", "", "testing"])
def test_environment_parse_rejects(raw):
    with pytest.raises(InvalidEnvironment):
        Environment.parse(raw)


def test_environment_parse_accepts():
    assert Environment.parse("test") is Environment.TEST
    assert Environment.parse(" Production ") is Environment.PRODUCTION
    assert Environment.parse("PROD") is Environment.PRODUCTION


def test_missing_attribute(make_request):
    doc = load_document(make_request(invoice_attrs={"SoftCode": None}))
    with pytest.raises(AttributeNotFound) as exc:
        build_verification_url(doc, Environment.TEST)
    assert exc.value.attribute == "SoftCode"


def test_missing_element():
    doc = load_document(b"<RegisterInvoiceRequest><Invoice IIC='1'/></RegisterInvoiceRequest>")
    with pytest.raises(ElementNotFound):
        build_verification_url(doc, Environment.TEST)


def test_link_is_idempotent(request_path):
    first = build_verification_url(load_document(request_path), Environment.PRODUCTION)
    second = build_verification_url(load_document(request_path), Environment.PRODUCTION)
    assert first == second


def test_environment_given_as_string(doc):
    assert build_verification_url(doc, "PRODUCTION") == build_verification_url(
        doc, Environment.PRODUCTION
    )
    assert build_verification_url(doc, "test").startswith("https://efitest.")


def test_fields_are_read_before_environment(make_request):
    doc = load_document(make_request(invoice_attrs={"IIC": None}))
    with pytest.raises(AttributeNotFound):
        build_verification_url(doc, "STAGING")
