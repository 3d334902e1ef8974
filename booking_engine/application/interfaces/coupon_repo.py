from booking_engine.domain.entities.coupon import Coupon


class CouponRepo:
    async def get_by_code(self, code: str) -> Coupon | None:
        raise NotImplementedError

    async def get(self, coupon_id: int) -> Coupon | None:
        raise NotImplementedError

    async def increment_usage(self, coupon_id: int) -> bool:
        """
        Conditionally add one use (``usage_count < usage_limit``).

        Returns False when no row was updated, i.e. the coupon is exhausted.
        """
        raise NotImplementedError
