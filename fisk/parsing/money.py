# File: fisk/parsing/money.py
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP

DEC2 = Decimal("0.01")


def parse_decimal(value: str | None) -> Decimal:
    """Convert an XML attribute value into :class:`Decimal`.

    Fiscal documents always use ``.`` as the decimal separator, but a comma
    is accepted too.  Raises :class:`ValueError` for anything non-numeric.
    """
    if value is None:
        raise ValueError("missing numeric value")
    txt = value.strip().replace("\xa0", "").replace(" ", "")
    if "," in txt and "." not in txt:
        txt = txt.replace(",", ".")
    try:
        result = Decimal(txt)
    except InvalidOperation:
        raise ValueError(f"not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return result


def round_to_step(
    value: Decimal, step: Decimal, rounding=ROUND_HALF_UP
) -> Decimal:
    """Round ``value`` to the nearest ``step`` (e.g. 0.01 or 0.05)."""
    if step == 0:
        return value
    quant = (value / step).quantize(Decimal("1"), rounding=rounding)
    return (quant * step).quantize(step)


def fmt_amount(value: Decimal) -> str:
    """Format a monetary amount with two decimals (``ROUND_HALF_UP``)."""
    result = round_to_step(value, DEC2)
    if result == 0:
        # -0.00 is never printed
        result = abs(result)
    return f"{result:.2f}"


def fmt_percent(value: Decimal) -> str:
    """Format a rate as a truncated whole percent, e.g. ``21%``."""
    whole = value.quantize(Decimal("1"), rounding=ROUND_DOWN)
    return f"{int(whole)}%"
