"""Money conversion and presentation rounding"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Amount = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


def to_decimal(value: Amount) -> Decimal:
    """Convert a numeric input to Decimal (floats go through str to keep their printed value)"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a monetary amount")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value: Amount) -> Decimal:
    """Round to cents for display; internal calculations keep full precision"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
