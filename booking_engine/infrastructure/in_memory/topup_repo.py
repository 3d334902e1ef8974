import copy
from collections import defaultdict
from typing import Sequence

from booking_engine.application.interfaces.topup_repo import TopupRepo
from booking_engine.domain.entities.topup import BookingTopup, Topup
from booking_engine.domain.errors import TopupNotFoundError
from booking_engine.infrastructure.in_memory.store import InMemoryStore


class InMemoryTopupRepo(TopupRepo, InMemoryStore):
    def __init__(self) -> None:
        self.topups: dict[int, Topup] = {}
        self.booking_topups: dict[int, BookingTopup] = {}
        self._by_booking: dict[int, list[int]] = defaultdict(list)
        self._next_topup_id = 1
        self._next_row_id = 1

    def add(self, topup: Topup) -> Topup:
        if topup.id is None:
            topup.id = self._next_topup_id
        self._next_topup_id = max(self._next_topup_id, topup.id + 1)
        self.topups[topup.id] = copy.deepcopy(topup)
        return topup

    async def get_topup(self, topup_id: int) -> Topup | None:
        topup = self.topups.get(topup_id)
        return copy.deepcopy(topup) if topup else None

    async def create_booking_topup(self, booking_topup: BookingTopup) -> BookingTopup:
        booking_topup.id = self._next_row_id
        self._next_row_id += 1
        self.booking_topups[booking_topup.id] = copy.deepcopy(booking_topup)
        self._by_booking[booking_topup.booking_id].append(booking_topup.id)
        return booking_topup

    async def get_booking_topup(self, booking_topup_id: int) -> BookingTopup | None:
        row = self.booking_topups.get(booking_topup_id)
        return copy.deepcopy(row) if row else None

    async def list_booking_topups(self, booking_id: int) -> Sequence[BookingTopup]:
        return [copy.deepcopy(self.booking_topups[i]) for i in self._by_booking.get(booking_id, [])]

    async def update_payment(self, booking_topup: BookingTopup) -> BookingTopup:
        stored = self.booking_topups.get(booking_topup.id)
        if stored is None:
            raise TopupNotFoundError(booking_topup.id, kind="booking topup")
        stored.payment_status = booking_topup.payment_status
        stored.payment_reference = booking_topup.payment_reference
        return booking_topup
