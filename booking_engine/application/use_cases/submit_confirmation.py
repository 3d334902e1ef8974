import logging

from booking_engine.api.schemas.bookings import SubmitConfirmationRequest
from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.application.use_cases.common import ensure_owner, load_booking
from booking_engine.domain.entities.booking import Booking, ConfirmationStatus, MilestoneStatus
from booking_engine.domain.errors import IllegalTransitionError

logger = logging.getLogger(__name__)


class SubmitConfirmationUseCase:
    """Customer uploads car condition and tool photos ahead of the PIC inspection."""

    def __init__(
        self,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, booking_id: int, request: SubmitConfirmationRequest) -> Booking:
        async with self._transaction_manager.start():
            booking = await load_booking(self._booking_repo, booking_id)
            ensure_owner(booking, request.user_id, "confirm")
            if booking.advance_payment_status != MilestoneStatus.COMPLETED:
                raise IllegalTransitionError(
                    booking.id,
                    booking.status.value,
                    "submit confirmation",
                    "advance payment must be completed before submitting a confirmation request",
                )

            resubmission = booking.confirmation_status == ConfirmationStatus.REJECTED
            expected_lock_version = booking.lock_version
            booking.submit_confirmation(
                car_condition_images=request.car_condition_images,
                tool_images=request.tool_images,
                tools=[tool.model_dump() for tool in request.tools],
                now=self._clock.now(),
            )
            booking = await self._booking_repo.update(booking, expected_lock_version)

        logger.info(
            "Confirmation submitted",
            extra={
                "booking_id": booking.id,
                "confirmation_status": booking.confirmation_status.value,
                "resubmission": resubmission,
            },
        )
        return booking
