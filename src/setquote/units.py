"""Exact integer unit math and display formatting.

Base-unit quantities are plain Python ints; fractional display values use
Decimal. Floats never enter the unit scaling.
"""

import re
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Optional, Union

from setquote.errors import InputError

# SetToken position units are 18-decimal fixed point
SCALE = 10**18

_DECIMAL_STRING = re.compile(r"^(\d+(\.\d*)?|\.\d+)$")

Number = Union[int, float, Decimal]


def parse_units(raw_amount: str, decimals: int) -> int:
    """Convert a human decimal string (e.g. "1.5") into integer base units.

    Raises:
        InputError: If the string is not a plain non-negative decimal or has
            more fractional digits than the token supports.
    """
    text = str(raw_amount).strip()
    if not _DECIMAL_STRING.match(text):
        raise InputError(f"Invalid amount: {raw_amount!r} is not a decimal number")

    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise InputError(
            f"Invalid amount: {raw_amount!r} has more than {decimals} decimal places"
        )

    # Built from the digits so no Decimal context precision applies
    return int(whole or "0") * 10**decimals + int(fraction.ljust(decimals, "0") or "0")


def ceil_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward positive infinity."""
    return -(-numerator // denominator)


def normalize_token_amount(amount: int, decimals: int) -> Decimal:
    """Base units -> token units as an exact Decimal."""
    digits = len(str(abs(amount)))
    return Decimal(amount).scaleb(-decimals, context=Context(prec=max(digits, 28)))


def format_units(amount: int, decimals: int) -> str:
    """Base units -> plain decimal string without trailing zeros ("1.5", "100")."""
    value = normalize_token_amount(amount, decimals)
    if value == 0:
        return "0"
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_number(value: Number) -> str:
    """Shortest plain rendering of a number: 45.0 -> "45", 45.50 -> "45.5"."""
    amount = to_decimal(value)
    if amount == amount.to_integral_value():
        return str(int(amount))
    return format(amount.normalize(), "f")


def format_percentage(value: Number) -> str:
    """Format a percentage with two decimals, e.g. 2 -> "2.00%"."""
    quantized = to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if quantized == 0:
        quantized = abs(quantized)
    return f"{quantized}%"


def format_usd(value: Number, significant_digits: Optional[int] = None) -> str:
    """Format a USD amount the way an en-US currency formatter does.

    Two fraction digits by default ("$1,234.56"). With ``significant_digits``
    the value is rounded to that many significant digits and trailing zeros
    are dropped ("$0.001235").
    """
    amount = to_decimal(value)

    if significant_digits is None:
        amount = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        text = f"{abs(amount):,.2f}"
    elif amount == 0:
        text = "0"
    else:
        quantum = Decimal(1).scaleb(amount.adjusted() - significant_digits + 1)
        amount = amount.quantize(quantum, rounding=ROUND_HALF_UP)
        text = f"{abs(amount):,f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")

    sign = "-" if amount < 0 else ""
    return f"{sign}${text}"
