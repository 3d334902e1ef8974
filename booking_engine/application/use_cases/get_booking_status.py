"""Read-side views of a booking: details, progress timeline and overdue list."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.payment_repo import PaymentRepo
from booking_engine.application.interfaces.pic_verification_repo import PicVerificationRepo
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.application.use_cases.common import load_booking
from booking_engine.domain.entities.booking import Booking, MilestoneStatus
from booking_engine.domain.entities.payment import Payment
from booking_engine.domain.entities.pic_verification import VerificationType
from booking_engine.domain.services.state_machine import BookingStatus

TIMELINE_ONTIME = "ontime"
TIMELINE_LATE = "late"
TOPUP_PREFIX = "topup/"


@dataclass
class BookingStatusView:
    booking: Booking
    timeline: str
    is_overdue: bool
    overdue_hours: int
    progress: dict[str, bool]
    next_steps: list[str] = field(default_factory=list)


@dataclass
class OverdueBookingView:
    booking: Booking
    overdue_hours: int
    return_inspection_status: str | None = None


def timeline_label(booking: Booking, now: datetime) -> str:
    """
    ``ontime``/``late`` against the effective end, prefixed with ``topup/``
    once the rental has been extended.
    """
    reference = booking.actual_dropoff_date or now
    started = booking.status in (BookingStatus.ACTIVE, BookingStatus.COMPLETED)
    late = started and reference > booking.effective_end_date
    label = TIMELINE_LATE if late else TIMELINE_ONTIME
    if booking.extension_till is not None:
        return TOPUP_PREFIX + label
    return label


def progress_flags(booking: Booking) -> dict[str, bool]:
    return {
        "advance_paid": booking.advance_payment_status == MilestoneStatus.COMPLETED,
        "user_confirmed": booking.user_confirmed,
        "pic_approved": booking.pic_approved,
        "otp_verified": booking.otp_verified,
        "final_paid": booking.final_payment_status == MilestoneStatus.COMPLETED,
        "picked_up": booking.actual_pickup_date is not None,
        "returned": booking.actual_dropoff_date is not None,
    }


def next_steps(booking: Booking, now: datetime) -> list[str]:
    steps: list[str] = []
    if booking.status == BookingStatus.PENDING:
        steps.append("Complete the advance payment")
    elif booking.status == BookingStatus.ADVANCE_PAID:
        if not booking.user_confirmed:
            steps.append("Submit car condition and tool photos")
        steps.append("Wait for the PIC pickup inspection")
    elif booking.status == BookingStatus.CONFIRMED:
        steps.append("Share the OTP at the parking site to pick up the car")
    elif booking.status == BookingStatus.ACTIVE:
        if booking.is_overdue(now):
            steps.append("Rental is overdue: return the car or buy a topup")
        if booking.final_payment_status != MilestoneStatus.COMPLETED:
            steps.append("Complete the final payment")
        steps.append("Return the car for the PIC return inspection")
    return steps


class GetBookingUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        payment_repo: PaymentRepo,
        transaction_manager: TransactionManager,
    ) -> None:
        self._booking_repo = booking_repo
        self._payment_repo = payment_repo
        self._transaction_manager = transaction_manager

    async def execute(self, booking_id: int) -> Booking:
        async with self._transaction_manager.start():
            return await load_booking(self._booking_repo, booking_id)

    async def list_payments(self, booking_id: int) -> Sequence[Payment]:
        async with self._transaction_manager.start():
            await load_booking(self._booking_repo, booking_id)
            return await self._payment_repo.list_payments(booking_id)


class GetBookingStatusUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, booking_id: int) -> BookingStatusView:
        async with self._transaction_manager.start():
            booking = await load_booking(self._booking_repo, booking_id)
        now = self._clock.now()
        return BookingStatusView(
            booking=booking,
            timeline=timeline_label(booking, now),
            is_overdue=booking.is_overdue(now),
            overdue_hours=booking.overdue_hours(now),
            progress=progress_flags(booking),
            next_steps=next_steps(booking, now),
        )


class ListOverdueUseCase:
    """Active rentals past their effective end, most overdue first."""

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

    async def execute(self, now: datetime | None = None) -> list[OverdueBookingView]:
        now = now or self._clock.now()
        views: list[OverdueBookingView] = []
        async with self._transaction_manager.start():
            for booking in await self._booking_repo.list_by_status(BookingStatus.ACTIVE):
                if not booking.is_overdue(now):
                    continue
                inspection = await self._verification_repo.get_verification(
                    booking.car_id, VerificationType.RETURN, booking.id
                )
                views.append(
                    OverdueBookingView(
                        booking=booking,
                        overdue_hours=booking.overdue_hours(now),
                        return_inspection_status=inspection.status.value if inspection else None,
                    )
                )
        views.sort(key=lambda v: v.booking.effective_end_date)
        return views
