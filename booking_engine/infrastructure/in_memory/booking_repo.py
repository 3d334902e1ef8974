import copy
from datetime import datetime
from typing import Sequence

from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.errors import BookingNotFoundError, StaleWriteError
from booking_engine.domain.services.availability import blocks_window
from booking_engine.domain.services.state_machine import BookingStatus
from booking_engine.infrastructure.in_memory.store import InMemoryStore


class InMemoryBookingRepo(BookingRepo, InMemoryStore):
    def __init__(self) -> None:
        self.bookings: dict[int, Booking] = {}
        self._next_id = 1

    async def create(self, booking: Booking) -> Booking:
        booking.id = self._next_id
        booking.lock_version = 0
        self._next_id += 1
        self.bookings[booking.id] = copy.deepcopy(booking)
        return booking

    async def get(self, booking_id: int) -> Booking | None:
        stored = self.bookings.get(booking_id)
        return copy.deepcopy(stored) if stored else None

    async def update(self, booking: Booking, expected_lock_version: int) -> Booking:
        stored = self.bookings.get(booking.id)
        if stored is None:
            raise BookingNotFoundError(booking.id)
        if stored.lock_version != expected_lock_version:
            raise StaleWriteError("booking", booking.id, expected_lock_version)
        booking.lock_version = expected_lock_version + 1
        self.bookings[booking.id] = copy.deepcopy(booking)
        return booking

    async def list_blocking_for_car(
        self,
        car_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: int | None = None,
    ) -> Sequence[Booking]:
        return [
            copy.deepcopy(b)
            for b in self.bookings.values()
            if b.car_id == car_id and blocks_window(b, start, end, exclude_booking_id)
        ]

    async def count_user_coupon_uses(self, user_id: int, coupon_id: int) -> int:
        return sum(
            1 for b in self.bookings.values() if b.user_id == user_id and b.coupon_id == coupon_id
        )

    async def list_by_status(self, status: BookingStatus) -> Sequence[Booking]:
        return [copy.deepcopy(b) for b in self.bookings.values() if b.status == status]
