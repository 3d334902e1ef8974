"""Money helpers. Amounts are ``Decimal`` with two places throughout the engine."""

from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")
UNIT = Decimal("1")


def to_money(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce to a 2-place Decimal; ``None`` becomes zero."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def round_to_unit(value: Decimal) -> Decimal:
    """Round half-up to the whole currency unit, keeping two places."""
    return value.quantize(UNIT, rounding=ROUND_HALF_UP).quantize(CENTS)
