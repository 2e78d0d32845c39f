import logging
from decimal import Decimal

from fisk.parsing.efi import parse_request
from fisk.tax import declared_totals, rebate_totals


def test_cumulative_rebate_breakdown(request_path, caplog):
    inv = parse_request(request_path).invoice
    with caplog.at_level(logging.WARNING, logger="fisk.tax"):
        totals = rebate_totals(inv)

    assert totals.price_before_vat == Decimal("70.00")
    # rebate of the second line is taken from the running subtotal (70.00)
    assert totals.rebate == Decimal("-7.00")
    assert totals.base == Decimal("63.00")
    assert totals.vat_amount == Decimal("17.43")
    assert totals.vat_rate == Decimal("21")
    # payable amount is always the declared TotPrice
    assert totals.total_price == Decimal("78.65")
    assert "total mismatch" in caplog.text


def test_zero_rebate_is_not_negated(make_request, caplog):
    inv = parse_request(make_request()).invoice
    with caplog.at_level(logging.WARNING, logger="fisk.tax"):
        totals = rebate_totals(inv)
    assert totals.rebate == 0
    assert not totals.rebate.is_signed()
    assert totals.base == Decimal("10.00")
    assert totals.vat_amount == Decimal("2.10")
    assert "total mismatch" not in caplog.text


def test_declared_totals(request_path):
    totals = declared_totals(parse_request(request_path).invoice)
    assert totals.price_before_vat == Decimal("65.00")
    assert totals.rebate == 0
    assert totals.base == Decimal("65.00")
    assert totals.vat_amount == Decimal("13.65")
    assert totals.total_price == Decimal("78.65")


def test_declared_totals_default_rate(make_request):
    totals = declared_totals(parse_request(make_request(vat_rate=None)).invoice)
    assert totals.vat_rate == Decimal("21")
