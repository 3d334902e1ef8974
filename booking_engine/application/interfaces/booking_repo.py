from datetime import datetime
from typing import Sequence

from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.services.state_machine import BookingStatus


class BookingRepo:
    async def create(self, booking: Booking) -> Booking:
        """Insert and return the booking with its id assigned."""
        raise NotImplementedError

    async def get(self, booking_id: int) -> Booking | None:
        raise NotImplementedError

    async def update(self, booking: Booking, expected_lock_version: int) -> Booking:
        """
        Persist every field of ``booking`` if the stored ``lock_version`` still
        equals ``expected_lock_version``; bump it by one.

        Raises:
            StaleWriteError: another writer got there first.
        """
        raise NotImplementedError

    async def list_blocking_for_car(
        self,
        car_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: int | None = None,
    ) -> Sequence[Booking]:
        """Bookings in a blocking status whose held window overlaps ``[start, end)``."""
        raise NotImplementedError

    async def count_user_coupon_uses(self, user_id: int, coupon_id: int) -> int:
        raise NotImplementedError

    async def list_by_status(self, status: BookingStatus) -> Sequence[Booking]:
        raise NotImplementedError
