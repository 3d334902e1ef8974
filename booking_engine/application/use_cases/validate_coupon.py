import logging
from dataclasses import dataclass
from decimal import Decimal

from booking_engine.api.schemas.coupons import ValidateCouponRequest
from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.coupon_repo import CouponRepo
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.domain.entities.coupon import Coupon
from booking_engine.domain.errors import CouponInvalidError
from booking_engine.domain.value_objects.money import to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CouponValidation:
    coupon: Coupon
    booking_amount: Decimal
    discount_amount: Decimal

    @property
    def final_amount(self) -> Decimal:
        return self.booking_amount - self.discount_amount


class ValidateCouponUseCase:
    """
    Checks a coupon code against a booking amount and computes its discount.

    Checks run in a fixed order and the first failure wins: unknown or
    inactive, outside its date window, exhausted, below the minimum amount,
    per-user limit reached.
    """

    def __init__(
        self,
        coupon_repo: CouponRepo,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._coupon_repo = coupon_repo
        self._booking_repo = booking_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def validate(
        self,
        code: str,
        booking_amount: Decimal,
        user_id: int | None = None,
    ) -> CouponValidation:
        """Run inside the caller's transaction."""
        booking_amount = to_money(booking_amount)
        coupon = await self._coupon_repo.get_by_code(code.strip())
        if coupon is None:
            raise CouponInvalidError(CouponInvalidError.NOT_FOUND, f"Coupon '{code}' not found")

        try:
            coupon.ensure_redeemable(booking_amount, self._clock.now())
            if user_id is not None:
                used = await self._booking_repo.count_user_coupon_uses(user_id, coupon.id)
                if used >= coupon.per_user_limit:
                    raise CouponInvalidError(
                        CouponInvalidError.PER_USER_LIMIT_REACHED,
                        "You have already used this coupon the maximum number of times",
                    )
        except CouponInvalidError as exc:
            logger.info(
                "Coupon rejected",
                extra={"coupon_code": coupon.code, "reason": exc.reason, "user_id": user_id},
            )
            raise

        return CouponValidation(
            coupon=coupon,
            discount_amount=coupon.calculate_discount(booking_amount),
            booking_amount=booking_amount,
        )

    async def execute(self, request: ValidateCouponRequest) -> CouponValidation:
        async with self._transaction_manager.start():
            return await self.validate(request.code, request.booking_amount, request.user_id)
