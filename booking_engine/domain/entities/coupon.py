"""Coupon entity and its discount rules."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from booking_engine.domain.errors import CouponInvalidError
from booking_engine.domain.value_objects.money import to_money


class DiscountType(str, Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class CouponStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


@dataclass
class Coupon:
    """
    Promotional code applied to the rental base price.

    ``usage_count`` only ever grows, and only when a booking is created with
    the coupon.
    """

    id: int | None = None
    code: str = ""
    name: str = ""
    discount_type: DiscountType = DiscountType.FIXED
    discount_amount: Decimal = Decimal("0")
    min_booking_amount: Decimal = Decimal("0")
    max_discount_amount: Decimal | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    usage_limit: int | None = None
    usage_count: int = 0
    per_user_limit: int = 1
    status: CouponStatus = CouponStatus.ACTIVE
    is_active: bool = True

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit

    def ensure_redeemable(self, booking_amount: Decimal, now: datetime) -> None:
        """
        Run the coupon-level checks in order and raise on the first failure.

        The per-user limit needs booking history and is checked by the caller.
        """
        if not self.is_active or self.status != CouponStatus.ACTIVE:
            raise CouponInvalidError(CouponInvalidError.INACTIVE, "Coupon is not active")
        if (self.start_date and now < self.start_date) or (self.end_date and now > self.end_date):
            raise CouponInvalidError(CouponInvalidError.EXPIRED, "Coupon has expired or is not yet valid")
        if self.is_exhausted:
            raise CouponInvalidError(CouponInvalidError.EXHAUSTED, "Coupon usage limit has been reached")
        if booking_amount < self.min_booking_amount:
            raise CouponInvalidError(
                CouponInvalidError.BELOW_MINIMUM,
                f"Minimum booking amount of {self.min_booking_amount} required for this coupon",
            )

    def calculate_discount(self, booking_amount: Decimal) -> Decimal:
        if self.discount_type == DiscountType.PERCENTAGE:
            discount = booking_amount * self.discount_amount / Decimal("100")
            if self.max_discount_amount is not None and discount > self.max_discount_amount:
                discount = self.max_discount_amount
        else:
            discount = self.discount_amount
        discount = min(discount, booking_amount)
        return to_money(max(discount, Decimal("0")))
