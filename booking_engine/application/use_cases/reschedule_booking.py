import logging

from booking_engine.api.schemas.bookings import RescheduleBookingRequest
from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.car_reader import CarReader
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.code_generator import OtpCodeGenerator
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.application.use_cases.check_availability import ensure_available
from booking_engine.application.use_cases.common import ensure_owner, load_booking
from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.errors import (
    CarNotFoundError,
    RescheduleLimitExceededError,
    ValidationError,
)
from booking_engine.domain.services import otp
from booking_engine.domain.services.state_machine import ensure_reschedulable
from booking_engine.domain.value_objects.datetime_range import DatetimeRange

logger = logging.getLogger(__name__)


class RescheduleBookingUseCase:
    """
    Move a booking that has not been handed over yet.

    Prices are kept as booked. An issued OTP is regenerated when the new
    pickup time moves and shifts its expiry by more than five minutes.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        car_reader: CarReader,
        code_generator: OtpCodeGenerator,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._car_reader = car_reader
        self._code_generator = code_generator
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, booking_id: int, request: RescheduleBookingRequest) -> Booking:
        async with self._transaction_manager.start():
            booking = await load_booking(self._booking_repo, booking_id)
            ensure_owner(booking, request.user_id, "reschedule")
            ensure_reschedulable(booking.id, booking.status)
            if booking.reschedule_count >= booking.max_reschedule_count:
                raise RescheduleLimitExceededError(booking.id, booking.max_reschedule_count)

            window = DatetimeRange(
                start=request.new_start_date or booking.start_date,
                end=request.new_end_date or booking.end_date,
            )
            if not window.start <= request.new_pickup_date < window.end:
                raise ValidationError(
                    "new_pickup_date", "Pickup must fall inside the rental window"
                )
            car = await self._car_reader.get_car(booking.car_id, for_update=True)
            if car is None:
                raise CarNotFoundError(booking.car_id)
            await ensure_available(self._booking_repo, car, window, exclude_booking_id=booking.id)

            expected_lock_version = booking.lock_version
            now = self._clock.now()
            previous_pickup = booking.effective_pickup_date
            booking.reschedule(request.new_pickup_date, window.start, window.end, now)

            otp_regenerated = False
            if (
                booking.otp_code
                and not booking.otp_verified
                and request.new_pickup_date != previous_pickup
                and otp.should_regenerate(booking.otp_expires_at, request.new_pickup_date, now)
            ):
                booking.issue_otp(
                    self._code_generator.generate(),
                    otp.expiry_for_pickup(request.new_pickup_date, now),
                    now,
                )
                otp_regenerated = True

            booking = await self._booking_repo.update(booking, expected_lock_version)

        logger.info(
            "Booking rescheduled",
            extra={
                "booking_id": booking.id,
                "reschedule_count": booking.reschedule_count,
                "pickup_date": booking.pickup_date.isoformat(),
                "otp_regenerated": otp_regenerated,
            },
        )
        return booking
