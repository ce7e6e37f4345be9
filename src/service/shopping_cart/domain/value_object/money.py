"""Money helpers: Decimal amounts rounded half-up to cents."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any


CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def to_decimal(value: Any) -> Decimal:
    # str() first so floats from JSON seeds do not carry binary noise
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_half_up(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
