"""Currency arithmetic helpers.

Amounts are persisted as floats and every calculation goes through Decimal
so that totals round the way a cashier would.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_amount(value) -> float:
    """Round to cents and convert to the float stored on aggregates."""
    return float(quantize(value))


def to_minor_units(value) -> int:
    """Express an amount in the smallest currency unit (cents)."""
    return int((to_decimal(value) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def prices_match(left, right, tolerance=CENT) -> bool:
    return abs(to_decimal(left) - to_decimal(right)) <= tolerance
