"""Fixed-point currency helpers. Every amount in the billing code passes through to_money."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_money(val) -> Decimal:
    """Coerce None/int/float/str/Decimal to a Decimal rounded half-up to paise."""
    if val is None:
        return ZERO
    if not isinstance(val, Decimal):
        # str() first so floats keep their printed value instead of the binary expansion
        val = Decimal(str(val))
    return val.quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values: Iterable) -> Decimal:
    total = ZERO
    for v in values:
        total += to_money(v)
    return total


def percent_of(amount, percentage) -> Decimal:
    """percentage is expressed 0-100."""
    return to_money(to_money(amount) * Decimal(str(percentage or 0)) / HUNDRED)


def floor_zero(amount) -> Decimal:
    return max(ZERO, to_money(amount))
