from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.application.interfaces.coupon_repo import CouponRepo
from booking_engine.domain.entities.coupon import Coupon, CouponStatus, DiscountType
from booking_engine.infrastructure.db.repositories.rows import to_entity
from booking_engine.infrastructure.db.tables import coupons

COUPON_ENUMS = {"discount_type": DiscountType, "status": CouponStatus}


class CouponRepoSQL(CouponRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_code(self, code: str) -> Coupon | None:
        stmt = select(coupons).where(func.upper(coupons.c.code) == code.upper()).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return to_entity(Coupon, row, COUPON_ENUMS) if row else None

    async def get(self, coupon_id: int) -> Coupon | None:
        stmt = select(coupons).where(coupons.c.id == coupon_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return to_entity(Coupon, row, COUPON_ENUMS) if row else None

    async def increment_usage(self, coupon_id: int) -> bool:
        stmt = (
            update(coupons)
            .where(
                coupons.c.id == coupon_id,
                or_(
                    coupons.c.usage_limit.is_(None),
                    coupons.c.usage_count < coupons.c.usage_limit,
                ),
            )
            .values(usage_count=coupons.c.usage_count + 1)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1
