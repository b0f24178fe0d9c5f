"""Decimal money utilities for offer prices.

Prices arrive as decimal currency units (not minor units), either as int,
float, str or Decimal. They are coerced through str() so float inputs keep
their printed value instead of their binary expansion.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


def to_decimal(value: int | float | str | Decimal | None) -> Decimal:
    """Coerce a price-like value to Decimal. None / unparsable -> Decimal(0)."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return Decimal(0)
    if not result.is_finite():
        return Decimal(0)
    return result


def round_half_up(value: Decimal) -> int:
    """Round to the nearest whole currency unit, halves away from zero: 2.5 -> 3."""
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def money_to_display(amount: int) -> str:
    """Whole units to display string: 1250 -> '$1,250', -30 -> '-$30'."""
    if amount < 0:
        return f"-${-amount:,}"
    return f"${amount:,}"
