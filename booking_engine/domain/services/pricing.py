"""
Pricing calculator.

Turns a car's daily rate and the booking add-ons into the binding price
breakdown stored on the booking. Pure and deterministic: same inputs, same
breakdown.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from booking_engine.domain.errors import ValidationError
from booking_engine.domain.value_objects.money import round_to_unit, to_money

ADVANCE_RATE = Decimal("0.5")


class DailyRateSource(Protocol):
    @property
    def daily_rate(self) -> Decimal: ...


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: Decimal
    insurance_amount: Decimal
    delivery_charges: Decimal
    discount_amount: Decimal
    total_before_discount: Decimal
    total_price: Decimal
    advance_amount: Decimal
    remaining_amount: Decimal


def split_advance(total_price: Decimal) -> tuple[Decimal, Decimal]:
    """Advance is half the total rounded half-up to a whole unit."""
    advance = round_to_unit(total_price * ADVANCE_RATE)
    return advance, to_money(total_price - advance)


def compute_breakdown(
    daily_rate_source: DailyRateSource,
    rental_days: int,
    insurance_amount: Decimal | None = None,
    delivery_charges: Decimal | None = None,
    discount_amount: Decimal | None = None,
) -> PriceBreakdown:
    if rental_days < 1:
        raise ValidationError("rental_days", "Rental must last at least one day")

    insurance = to_money(insurance_amount)
    delivery = to_money(delivery_charges)
    if insurance < 0:
        raise ValidationError("insurance_amount", "Must not be negative")
    if delivery < 0:
        raise ValidationError("delivery_charges", "Must not be negative")

    base_price = to_money(to_money(daily_rate_source.daily_rate) * rental_days)
    total_before_discount = base_price + insurance + delivery

    discount = to_money(discount_amount)
    discount = min(max(discount, Decimal("0.00")), total_before_discount)

    total_price = max(total_before_discount - discount, Decimal("0.00"))
    advance, remaining = split_advance(total_price)

    return PriceBreakdown(
        base_price=base_price,
        insurance_amount=insurance,
        delivery_charges=delivery,
        discount_amount=discount,
        total_before_discount=total_before_discount,
        total_price=total_price,
        advance_amount=advance,
        remaining_amount=remaining,
    )
