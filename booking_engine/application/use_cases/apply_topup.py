import logging

from booking_engine.api.schemas.bookings import ApplyTopupRequest
from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.topup_repo import TopupRepo
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.application.use_cases.common import ensure_owner, load_booking
from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.entities.topup import BookingTopup, TopupPaymentStatus
from booking_engine.domain.errors import IllegalTransitionError, TopupNotFoundError, ValidationError
from booking_engine.domain.services.state_machine import BookingStatus

logger = logging.getLogger(__name__)


class ApplyTopupUseCase:
    """
    Open a pending extension for an active rental.

    Extensions chain: each new row starts where the latest non-failed one
    ends. The booking itself only moves once the topup payment is confirmed.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        topup_repo: TopupRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._topup_repo = topup_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, booking_id: int, request: ApplyTopupRequest) -> BookingTopup:
        async with self._transaction_manager.start():
            booking = await load_booking(self._booking_repo, booking_id)
            ensure_owner(booking, request.user_id, "extend")
            if booking.status != BookingStatus.ACTIVE:
                raise IllegalTransitionError(
                    booking.id, booking.status.value, "extend", "topups can only be applied to active bookings"
                )

            topup = await self._topup_repo.get_topup(request.topup_id)
            if topup is None:
                raise TopupNotFoundError(request.topup_id)
            if not topup.is_active:
                raise ValidationError("topup_id", f"Topup {topup.id} is not active")

            original_end = await self._chained_end(booking)
            now = self._clock.now()
            row = await self._topup_repo.create_booking_topup(
                BookingTopup(
                    booking_id=booking.id,
                    topup_id=topup.id,
                    applied_at=now,
                    original_end_date=original_end,
                    new_end_date=original_end + topup.duration,
                    amount=topup.price,
                    payment_status=TopupPaymentStatus.PENDING,
                    created_at=now,
                )
            )

        logger.info(
            "Topup applied",
            extra={
                "booking_id": booking.id,
                "booking_topup_id": row.id,
                "topup_id": topup.id,
                "new_end_date": row.new_end_date.isoformat(),
            },
        )
        return row

    async def _chained_end(self, booking: Booking):
        rows = await self._topup_repo.list_booking_topups(booking.id)
        live = [r for r in rows if r.payment_status != TopupPaymentStatus.FAILED]
        if live:
            return max(r.new_end_date for r in live)
        return booking.effective_end_date
