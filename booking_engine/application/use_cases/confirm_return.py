import logging

from booking_engine.api.schemas.bookings import ConfirmReturnRequest
from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.pic_verification_repo import PicVerificationRepo
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.application.use_cases.common import load_booking, log_transition
from booking_engine.domain.entities.booking import Booking, MilestoneStatus
from booking_engine.domain.entities.pic_verification import (
    PicVerification,
    VerificationStatus,
    VerificationType,
)
from booking_engine.domain.errors import IllegalTransitionError
from booking_engine.domain.services.state_machine import BookingEvent, BookingStatus

logger = logging.getLogger(__name__)


class ConfirmReturnUseCase:
    """
    Close an active rental.

    Requires an approved return inspection and a completed final payment.
    A booking missing either stays ``active`` and shows up as overdue once
    its end date passes.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        verification_repo: PicVerificationRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._verification_repo = verification_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, booking_id: int, request: ConfirmReturnRequest) -> Booking:
        async with self._transaction_manager.start():
            booking = await load_booking(self._booking_repo, booking_id)
            if booking.status != BookingStatus.ACTIVE:
                raise IllegalTransitionError(
                    booking.id, booking.status.value, BookingEvent.RETURN_CONFIRMED.value
                )

            missing = await self._missing_prerequisites(booking)
            if missing:
                logger.warning(
                    "Return blocked for booking %s: %s",
                    booking.id,
                    ", ".join(missing),
                    extra={"booking_id": booking.id, "missing": missing},
                )
                raise IllegalTransitionError(
                    booking.id,
                    booking.status.value,
                    BookingEvent.RETURN_CONFIRMED.value,
                    f"missing prerequisites: {', '.join(missing)}",
                )

            expected_lock_version = booking.lock_version
            previous = booking.status
            booking.complete(
                self._clock.now(),
                return_condition=request.return_condition,
                return_images=request.return_images,
                return_comments=request.return_comments,
            )
            booking = await self._booking_repo.update(booking, expected_lock_version)

        log_transition(booking, previous, BookingEvent.RETURN_CONFIRMED.value)
        return booking

    async def _missing_prerequisites(self, booking: Booking) -> list[str]:
        missing: list[str] = []
        inspection = await self._verification_repo.get_verification(
            booking.car_id, VerificationType.RETURN, booking.id
        )
        if inspection is not None and _recorded_before_handover(inspection, booking):
            inspection = None
        if inspection is None:
            missing.append("return inspection")
        elif inspection.status != VerificationStatus.APPROVED:
            missing.append(f"approved return inspection (currently {inspection.status.value})")
        if booking.final_payment_status != MilestoneStatus.COMPLETED:
            missing.append("final payment")
        return missing


def _recorded_before_handover(inspection: PicVerification, booking: Booking) -> bool:
    if inspection.created_at is None or booking.actual_pickup_date is None:
        return False
    return inspection.created_at < booking.actual_pickup_date
