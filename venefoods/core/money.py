# venefoods/core/money.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Money = Decimal

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def D(x) -> Money:
    """
    Coerce store values to Decimal.

    Accepts Decimal, int, float and numeric strings. Strings may use a
    comma as decimal separator ("18,50"), as typed in the back-office.
    Blank / None become 0.
    """
    if isinstance(x, Decimal):
        return x
    if x is None:
        return Decimal("0")
    if isinstance(x, str):
        raw = x.strip().replace(" ", "")
        if not raw:
            return Decimal("0")
        if "," in raw and "." in raw:
            # "1.234,50" -> "1234.50"
            raw = raw.replace(".", "").replace(",", ".")
        else:
            raw = raw.replace(",", ".")
        try:
            return Decimal(raw)
        except InvalidOperation:
            raise ValueError(f"not a number: {x!r}")
    return Decimal(str(x))


def round_money(x) -> Money:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)


def format_brl(x) -> str:
    """R$ 1234.50 style, as printed on the storefront."""
    return f"R$ {round_money(x):.2f}"
