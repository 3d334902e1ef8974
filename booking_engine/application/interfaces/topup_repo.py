from typing import Sequence

from booking_engine.domain.entities.topup import BookingTopup, Topup


class TopupRepo:
    async def get_topup(self, topup_id: int) -> Topup | None:
        raise NotImplementedError

    async def create_booking_topup(self, booking_topup: BookingTopup) -> BookingTopup:
        raise NotImplementedError

    async def get_booking_topup(self, booking_topup_id: int) -> BookingTopup | None:
        raise NotImplementedError

    async def list_booking_topups(self, booking_id: int) -> Sequence[BookingTopup]:
        """Ledger rows of a booking, oldest first."""
        raise NotImplementedError

    async def update_payment(self, booking_topup: BookingTopup) -> BookingTopup:
        """Persist ``payment_status`` and ``payment_reference`` only."""
        raise NotImplementedError
