import copy

from booking_engine.application.interfaces.coupon_repo import CouponRepo
from booking_engine.domain.entities.coupon import Coupon
from booking_engine.infrastructure.in_memory.store import InMemoryStore


class InMemoryCouponRepo(CouponRepo, InMemoryStore):
    def __init__(self) -> None:
        self.coupons: dict[int, Coupon] = {}
        self._next_id = 1

    def add(self, coupon: Coupon) -> Coupon:
        if coupon.id is None:
            coupon.id = self._next_id
        self._next_id = max(self._next_id, coupon.id + 1)
        self.coupons[coupon.id] = copy.deepcopy(coupon)
        return coupon

    async def get_by_code(self, code: str) -> Coupon | None:
        wanted = code.upper()
        for coupon in self.coupons.values():
            if coupon.code.upper() == wanted:
                return copy.deepcopy(coupon)
        return None

    async def get(self, coupon_id: int) -> Coupon | None:
        coupon = self.coupons.get(coupon_id)
        return copy.deepcopy(coupon) if coupon else None

    async def increment_usage(self, coupon_id: int) -> bool:
        coupon = self.coupons.get(coupon_id)
        if coupon is None:
            return False
        if coupon.usage_limit is not None and coupon.usage_count >= coupon.usage_limit:
            return False
        coupon.usage_count += 1
        return True
