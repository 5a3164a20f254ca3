"""
Precision of stored amounts and rates.

Line amounts are Numeric(38, 9) and rates Numeric(38, 10).  Every value
written to or compared against those columns goes through the quantize
helpers here, half-up.
"""

from decimal import ROUND_HALF_UP, Decimal

MONEY_PLACES = 9
RATE_PLACES = 10

ZERO = Decimal("0")

_MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_PLACES)
_RATE_QUANTUM = Decimal(1).scaleb(-RATE_PLACES)


def to_stored_amount(value: Decimal) -> Decimal:
    """Quantize an amount to the precision of a line amount column."""
    return value.quantize(_MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def to_stored_rate(value: Decimal) -> Decimal:
    return value.quantize(_RATE_QUANTUM, rounding=ROUND_HALF_UP)
