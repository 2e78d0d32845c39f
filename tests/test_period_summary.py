from datetime import date
from decimal import Decimal

from fisk.exempt import COLUMNS, period_table, summarize_period, summary_from_table
from fisk.parsing.efi import parse_request

ITEM = {"N": "A", "Q": "2", "UPB": "10", "R": "10", "VR": "21"}


def _requests(make_request):
    return [
        parse_request(make_request([ITEM], number="R1", issue="2023-05-01T08:00:00+02:00")),
        parse_request(make_request([ITEM, ITEM], number="R2", issue="2023-05-31T23:59:00+02:00")),
        parse_request(make_request([ITEM], number="R3", issue="2023-06-01T00:00:00+02:00")),
    ]


def test_period_table_groups_per_invoice(make_request):
    df = period_table(_requests(make_request), date(2023, 5, 1), date(2023, 5, 31))
    assert list(df.columns) == COLUMNS
    assert list(df["racun"]) == ["R1", "R2"]
    assert df.attrs["count"] == 2
    r2 = df[df["racun"] == "R2"].iloc[0]
    assert r2["osnovica"] == Decimal("40")
    assert r2["rabat"] == Decimal("4")
    assert r2["osnovica_rabat"] == Decimal("36")
    assert r2["pdv"] == Decimal("7.56")


def test_summary_bounds_are_inclusive(make_request):
    s = summarize_period(_requests(make_request), date(2023, 5, 1), date(2023, 5, 31))
    assert s.count == 2
    assert s.base_before_rebate == Decimal("60")
    assert s.rebate == Decimal("6")
    assert s.base_after_rebate == Decimal("54")
    assert s.vat_amount == Decimal("11.34")
    assert s.total == Decimal("65.34")


def test_empty_period(make_request):
    df = period_table(_requests(make_request), date(2022, 1, 1), date(2022, 1, 31))
    assert df.empty
    s = summary_from_table(df)
    assert s.count == 0
    assert s.total == 0
