from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number | None) -> Decimal:
    """Convert a number to Decimal, going through str for floats."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value: Number | None) -> Decimal:
    """Quantize a value to currency precision (cents, half-up)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Number]) -> Decimal:
    return sum((to_decimal(v) for v in values), ZERO)
