from typing import Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.application.interfaces.topup_repo import TopupRepo
from booking_engine.domain.entities.topup import BookingTopup, Topup, TopupPaymentStatus
from booking_engine.domain.errors import TopupNotFoundError
from booking_engine.infrastructure.db.repositories.rows import to_entity, to_row
from booking_engine.infrastructure.db.tables import booking_topups, topups

ROW_ENUMS = {"payment_status": TopupPaymentStatus}


class TopupRepoSQL(TopupRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_topup(self, topup_id: int) -> Topup | None:
        stmt = select(topups).where(topups.c.id == topup_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return to_entity(Topup, row) if row else None

    async def create_booking_topup(self, booking_topup: BookingTopup) -> BookingTopup:
        result = await self._session.execute(
            insert(booking_topups).values(to_row(booking_topup))
        )
        booking_topup.id = result.inserted_primary_key[0]
        return booking_topup

    async def get_booking_topup(self, booking_topup_id: int) -> BookingTopup | None:
        stmt = select(booking_topups).where(booking_topups.c.id == booking_topup_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return to_entity(BookingTopup, row, ROW_ENUMS) if row else None

    async def list_booking_topups(self, booking_id: int) -> Sequence[BookingTopup]:
        stmt = (
            select(booking_topups)
            .where(booking_topups.c.booking_id == booking_id)
            .order_by(booking_topups.c.id)
        )
        result = await self._session.execute(stmt)
        return [to_entity(BookingTopup, row, ROW_ENUMS) for row in result.mappings().all()]

    async def update_payment(self, booking_topup: BookingTopup) -> BookingTopup:
        stmt = (
            update(booking_topups)
            .where(booking_topups.c.id == booking_topup.id)
            .values(
                payment_status=booking_topup.payment_status.value,
                payment_reference=booking_topup.payment_reference,
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise TopupNotFoundError(booking_topup.id, kind="booking topup")
        return booking_topup
