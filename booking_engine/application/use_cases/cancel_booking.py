import logging

from booking_engine.api.schemas.bookings import CancelBookingRequest
from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.application.use_cases.common import ensure_owner, load_booking, log_transition
from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.services.state_machine import BookingEvent

logger = logging.getLogger(__name__)


class CancelBookingUseCase:
    """
    Cancel a non-terminal booking.

    Customers can only cancel their own booking and only before the car has
    been handed over. Admins may cancel any non-terminal booking.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, booking_id: int, request: CancelBookingRequest) -> Booking:
        async with self._transaction_manager.start():
            booking = await load_booking(self._booking_repo, booking_id)
            if not request.as_admin:
                ensure_owner(booking, request.user_id, "cancel")

            expected_lock_version = booking.lock_version
            previous = booking.status
            booking.cancel(by_user=not request.as_admin, now=self._clock.now())
            booking = await self._booking_repo.update(booking, expected_lock_version)

        log_transition(booking, previous, BookingEvent.CANCEL.value)
        if request.as_admin:
            logger.info(
                "Booking cancelled by admin",
                extra={"booking_id": booking.id, "admin_id": request.user_id},
            )
        return booking
