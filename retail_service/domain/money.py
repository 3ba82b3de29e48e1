# retail_service/domain/money.py
"""
Fixed-point currency helpers
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CURRENCY_SCALE = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyLike = Union[Decimal, int, float, str]


def to_money(value: MoneyLike) -> Decimal:
    """
    Normalise a value to currency precision (2 dp, round half up)

    Floats go through ``str`` first so binary artefacts such as
    ``0.1 + 0.2`` never reach a total.
    """
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CURRENCY_SCALE, rounding=ROUND_HALF_UP)
