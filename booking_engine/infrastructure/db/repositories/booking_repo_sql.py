from datetime import datetime
from typing import Sequence

from sqlalchemy import func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.domain.entities.booking import (
    Booking,
    ConfirmationStatus,
    DeliveryType,
    MilestoneStatus,
)
from booking_engine.domain.errors import BookingNotFoundError, StaleWriteError
from booking_engine.domain.services.state_machine import BLOCKING_STATUSES, BookingStatus
from booking_engine.infrastructure.db.repositories.rows import to_entity, to_row
from booking_engine.infrastructure.db.tables import bookings

BOOKING_ENUMS = {
    "status": BookingStatus,
    "confirmation_status": ConfirmationStatus,
    "advance_payment_status": MilestoneStatus,
    "final_payment_status": MilestoneStatus,
    "delivery_type": DeliveryType,
}


def _to_booking(row) -> Booking:
    return to_entity(Booking, row, BOOKING_ENUMS)


class BookingRepoSQL(BookingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, booking: Booking) -> Booking:
        booking.lock_version = 0
        result = await self._session.execute(insert(bookings).values(to_row(booking)))
        booking.id = result.inserted_primary_key[0]
        return booking

    async def get(self, booking_id: int) -> Booking | None:
        stmt = select(bookings).where(bookings.c.id == booking_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_booking(row) if row else None

    async def update(self, booking: Booking, expected_lock_version: int) -> Booking:
        values = to_row(booking, exclude=("id", "created_at"))
        values["lock_version"] = expected_lock_version + 1
        stmt = (
            update(bookings)
            .where(
                bookings.c.id == booking.id,
                bookings.c.lock_version == expected_lock_version,
            )
            .values(values)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            if await self.get(booking.id) is None:
                raise BookingNotFoundError(booking.id)
            raise StaleWriteError("booking", booking.id, expected_lock_version)
        booking.lock_version = expected_lock_version + 1
        return booking

    async def list_blocking_for_car(
        self,
        car_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: int | None = None,
    ) -> Sequence[Booking]:
        where_clause = [
            bookings.c.car_id == car_id,
            bookings.c.status.in_([s.value for s in BLOCKING_STATUSES]),
            bookings.c.start_date < end,
            or_(bookings.c.end_date > start, bookings.c.extension_till > start),
        ]
        if exclude_booking_id is not None:
            where_clause.append(bookings.c.id != exclude_booking_id)
        result = await self._session.execute(select(bookings).where(*where_clause))
        return [_to_booking(row) for row in result.mappings().all()]

    async def count_user_coupon_uses(self, user_id: int, coupon_id: int) -> int:
        stmt = select(func.count()).select_from(bookings).where(
            bookings.c.user_id == user_id,
            bookings.c.coupon_id == coupon_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def list_by_status(self, status: BookingStatus) -> Sequence[Booking]:
        stmt = select(bookings).where(bookings.c.status == status.value).order_by(bookings.c.id)
        result = await self._session.execute(stmt)
        return [_to_booking(row) for row in result.mappings().all()]
