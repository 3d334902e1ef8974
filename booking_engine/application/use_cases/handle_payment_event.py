"""
Payment reconciliation.

Payment callbacks arrive asynchronously and resume the state machine. An
advance or final event that was already applied with the same reference is
acknowledged without changes; a different reference is rejected.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.code_generator import OtpCodeGenerator
from booking_engine.application.interfaces.payment_repo import PaymentRepo
from booking_engine.application.interfaces.topup_repo import TopupRepo
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.application.use_cases.common import load_booking, log_transition
from booking_engine.domain.entities.booking import Booking, MilestoneStatus
from booking_engine.domain.entities.payment import (
    Payment,
    PaymentEvent,
    PaymentEventStatus,
    PaymentMilestone,
)
from booking_engine.domain.entities.topup import TopupPaymentStatus
from booking_engine.domain.errors import IllegalTransitionError, TopupNotFoundError
from booking_engine.domain.services import otp
from booking_engine.domain.services.state_machine import BookingEvent

logger = logging.getLogger(__name__)


@dataclass
class _Effect:
    amount: Decimal
    booking_changed: bool = True


@dataclass
class PaymentEventOutcome:
    booking: Booking
    applied: bool
    payment: Payment | None = None


class HandlePaymentEventUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        topup_repo: TopupRepo,
        payment_repo: PaymentRepo,
        code_generator: OtpCodeGenerator,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._topup_repo = topup_repo
        self._payment_repo = payment_repo
        self._code_generator = code_generator
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, event: PaymentEvent) -> PaymentEventOutcome:
        async with self._transaction_manager.start():
            booking = await load_booking(self._booking_repo, event.booking_id)
            expected_lock_version = booking.lock_version

            if event.milestone == PaymentMilestone.ADVANCE:
                effect = self._apply_advance(booking, event)
            elif event.milestone == PaymentMilestone.FINAL:
                effect = self._apply_final(booking, event)
            else:
                effect = await self._apply_topup(booking, event)

            if effect is None:
                logger.info(
                    "Duplicate payment event acknowledged",
                    extra={
                        "booking_id": booking.id,
                        "milestone": event.milestone.value,
                        "reference_id": event.reference_id,
                    },
                )
                return PaymentEventOutcome(booking=booking, applied=False)

            if effect.booking_changed:
                booking = await self._booking_repo.update(booking, expected_lock_version)
            payment = await self._payment_repo.record(
                Payment(
                    booking_id=booking.id,
                    milestone=event.milestone,
                    status=event.status,
                    amount=event.amount if event.amount is not None else effect.amount,
                    reference_id=event.reference_id,
                    booking_topup_id=event.booking_topup_id,
                    created_at=self._clock.now(),
                )
            )

        logger.info(
            "Payment event applied",
            extra={
                "booking_id": booking.id,
                "milestone": event.milestone.value,
                "payment_status": event.status.value,
                "reference_id": event.reference_id,
            },
        )
        return PaymentEventOutcome(booking=booking, applied=True, payment=payment)

    def _already_applied(
        self,
        booking: Booking,
        event: PaymentEvent,
        status: MilestoneStatus,
        reference: str | None,
    ) -> bool:
        if status != MilestoneStatus.COMPLETED:
            return False
        if event.status == PaymentEventStatus.COMPLETED and reference == event.reference_id:
            return True
        raise IllegalTransitionError(
            booking.id,
            booking.status.value,
            f"{event.milestone.value} payment {event.status.value}",
            f"{event.milestone.value} payment already completed with reference {reference}",
        )

    def _apply_advance(self, booking: Booking, event: PaymentEvent) -> _Effect | None:
        if self._already_applied(
            booking, event, booking.advance_payment_status, booking.advance_payment_reference
        ):
            return None

        now = self._clock.now()
        if event.status == PaymentEventStatus.FAILED:
            booking.record_advance_failure(now)
            return _Effect(amount=booking.advance_amount)

        previous = booking.status
        booking.mark_advance_paid(event.reference_id, now)
        booking.issue_otp(
            self._code_generator.generate(),
            otp.expiry_for_pickup(booking.effective_pickup_date, now),
            now,
        )
        log_transition(booking, previous, BookingEvent.ADVANCE_PAYMENT_COMPLETED.value)
        return _Effect(amount=booking.advance_amount)

    def _apply_final(self, booking: Booking, event: PaymentEvent) -> _Effect | None:
        if self._already_applied(
            booking, event, booking.final_payment_status, booking.final_payment_reference
        ):
            return None

        now = self._clock.now()
        if event.status == PaymentEventStatus.FAILED:
            booking.record_final_failure(now)
        else:
            booking.record_final_payment(event.reference_id, now)
        return _Effect(amount=booking.remaining_amount)

    async def _apply_topup(self, booking: Booking, event: PaymentEvent) -> _Effect | None:
        row = await self._topup_repo.get_booking_topup(event.booking_topup_id)
        if row is None or row.booking_id != booking.id:
            raise TopupNotFoundError(event.booking_topup_id, kind="booking topup")

        if row.payment_status != TopupPaymentStatus.PENDING:
            same_outcome = (
                row.payment_status == TopupPaymentStatus.PAID
                and event.status == PaymentEventStatus.COMPLETED
            ) or (
                row.payment_status == TopupPaymentStatus.FAILED
                and event.status == PaymentEventStatus.FAILED
            )
            if same_outcome and row.payment_reference == event.reference_id:
                return None
            raise IllegalTransitionError(
                booking.id,
                booking.status.value,
                f"topup payment {event.status.value}",
                f"booking topup {row.id} is already {row.payment_status.value}",
            )

        if event.status == PaymentEventStatus.FAILED:
            row.mark_failed(event.reference_id)
            await self._topup_repo.update_payment(row)
            return _Effect(amount=row.amount, booking_changed=False)

        booking.apply_extension(row.new_end_date, row.amount, row.hours, self._clock.now())
        row.mark_paid(event.reference_id)
        await self._topup_repo.update_payment(row)
        logger.info(
            "Booking extended",
            extra={
                "booking_id": booking.id,
                "booking_topup_id": row.id,
                "extension_till": booking.extension_till.isoformat(),
            },
        )
        return _Effect(amount=row.amount)
