import logging

from booking_engine.api.schemas.bookings import GenerateOtpRequest, VerifyOtpRequest
from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.code_generator import OtpCodeGenerator
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.application.use_cases.common import ensure_owner, load_booking, log_transition
from booking_engine.domain.entities.booking import Booking, MilestoneStatus
from booking_engine.domain.errors import IllegalTransitionError, OtpError
from booking_engine.domain.services import otp
from booking_engine.domain.services.state_machine import BookingEvent, BookingStatus

logger = logging.getLogger(__name__)

OTP_ISSUABLE_STATUSES = (BookingStatus.ADVANCE_PAID, BookingStatus.CONFIRMED)


class GenerateOtpUseCase:
    """Issue a fresh pickup OTP, replacing any unverified one."""

    def __init__(
        self,
        booking_repo: BookingRepo,
        code_generator: OtpCodeGenerator,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._code_generator = code_generator
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, booking_id: int, request: GenerateOtpRequest) -> Booking:
        async with self._transaction_manager.start():
            booking = await load_booking(self._booking_repo, booking_id)
            ensure_owner(booking, request.user_id, "request an OTP for")
            if booking.status not in OTP_ISSUABLE_STATUSES or (
                booking.advance_payment_status != MilestoneStatus.COMPLETED
            ):
                raise IllegalTransitionError(
                    booking.id,
                    booking.status.value,
                    "issue OTP",
                    "OTP can only be issued once the advance payment is completed",
                )
            if booking.otp_verified:
                raise OtpError(OtpError.ALREADY_VERIFIED, "OTP has already been verified")

            expected_lock_version = booking.lock_version
            now = self._clock.now()
            booking.issue_otp(
                self._code_generator.generate(),
                otp.expiry_for_pickup(booking.effective_pickup_date, now),
                now,
            )
            booking = await self._booking_repo.update(booking, expected_lock_version)

        logger.info(
            "OTP issued",
            extra={"booking_id": booking.id, "otp_expires_at": booking.otp_expires_at.isoformat()},
        )
        return booking


class VerifyOtpUseCase:
    """
    Check the pickup OTP at the parking site and hand the car over.

    A successful check is single use: it moves the booking to ``active`` and
    stamps ``actual_pickup_date``.
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

    async def execute(self, booking_id: int, request: VerifyOtpRequest) -> Booking:
        async with self._transaction_manager.start():
            booking = await load_booking(self._booking_repo, booking_id)
            now = self._clock.now()
            try:
                otp.check_code(booking, request.otp_code, now)
            except OtpError as exc:
                logger.info(
                    "OTP verification failed",
                    extra={"booking_id": booking.id, "reason": exc.reason},
                )
                raise

            expected_lock_version = booking.lock_version
            previous = booking.status
            booking.start_rental(request.verified_by, now)
            booking = await self._booking_repo.update(booking, expected_lock_version)

        log_transition(booking, previous, BookingEvent.OTP_VERIFIED.value)
        return booking
