"""
PIC inspection workflow.

An inspector opens a record per inspection, edits it while it is pending or
flagged for recheck, then finalizes it. A finalized pickup inspection drives the
booking: approval confirms it, rejection denies it. Return inspections are
only recorded here and re-checked when the return is confirmed.
"""

import logging

from booking_engine.api.schemas.pic import (
    CreateVerificationRequest,
    FinalizeVerificationRequest,
    UpdateVerificationRequest,
)
from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.pic_verification_repo import PicVerificationRepo
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.application.use_cases.common import load_booking, log_transition
from booking_engine.domain.entities.pic_verification import (
    PicVerification,
    VerificationStatus,
    VerificationType,
)
from booking_engine.domain.errors import (
    IllegalTransitionError,
    ValidationError,
    VerificationNotFoundError,
)
from booking_engine.domain.services.state_machine import BookingEvent, BookingStatus, ensure_mutable

logger = logging.getLogger(__name__)

# A pickup inspection happens between advance payment and handover, a return
# inspection while the car is out.
INSPECTABLE_STATUS = {
    VerificationType.PICKUP: BookingStatus.ADVANCE_PAID,
    VerificationType.RETURN: BookingStatus.ACTIVE,
}


class SubmitVerificationUseCase:
    def __init__(
        self,
        verification_repo: PicVerificationRepo,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._verification_repo = verification_repo
        self._booking_repo = booking_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, request: CreateVerificationRequest) -> PicVerification:
        async with self._transaction_manager.start():
            booking = await load_booking(self._booking_repo, request.booking_id)
            if booking.car_id != request.car_id:
                raise ValidationError("car_id", f"Booking {booking.id} is not for car {request.car_id}")
            ensure_mutable(booking.id, booking.status, f"open {request.verification_type.value} inspection")
            required = INSPECTABLE_STATUS[request.verification_type]
            if booking.status != required:
                raise IllegalTransitionError(
                    booking.id,
                    booking.status.value,
                    f"open {request.verification_type.value} inspection",
                    f"booking must be {required.value}",
                )

            now = self._clock.now()
            verification = await self._verification_repo.create(
                PicVerification(
                    car_id=request.car_id,
                    parking_id=request.parking_id,
                    pic_id=request.pic_id,
                    booking_id=request.booking_id,
                    verification_type=request.verification_type,
                    engine_condition=request.engine_condition,
                    body_condition=request.body_condition,
                    interior_condition=request.interior_condition,
                    tire_condition=request.tire_condition,
                    rc_verified=request.rc_verified,
                    insurance_verified=request.insurance_verified,
                    pollution_verified=request.pollution_verified,
                    verification_images=list(request.verification_images),
                    pic_comments=request.pic_comments,
                    vendor_feedback=request.vendor_feedback,
                    created_at=now,
                    updated_at=now,
                )
            )

        logger.info(
            "Inspection opened",
            extra={
                "verification_id": verification.id,
                "booking_id": verification.booking_id,
                "verification_type": verification.verification_type.value,
                "pic_id": verification.pic_id,
            },
        )
        return verification


class UpdateVerificationUseCase:
    def __init__(
        self,
        verification_repo: PicVerificationRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._verification_repo = verification_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(
        self, verification_id: int, request: UpdateVerificationRequest
    ) -> PicVerification:
        async with self._transaction_manager.start():
            verification = await self._verification_repo.get(verification_id)
            if verification is None:
                raise VerificationNotFoundError(verification_id)
            expected_lock_version = verification.lock_version
            changes = request.model_dump(exclude_unset=True, exclude={"pic_id"})
            verification.update(request.pic_id, changes, self._clock.now())
            return await self._verification_repo.update(verification, expected_lock_version)


class FinalizeVerificationUseCase:
    def __init__(
        self,
        verification_repo: PicVerificationRepo,
        booking_repo: BookingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._verification_repo = verification_repo
        self._booking_repo = booking_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(
        self, verification_id: int, request: FinalizeVerificationRequest
    ) -> PicVerification:
        async with self._transaction_manager.start():
            verification = await self._verification_repo.get(verification_id)
            if verification is None:
                raise VerificationNotFoundError(verification_id)
            expected_lock_version = verification.lock_version

            now = self._clock.now()
            verification.finalize(request.pic_id, request.status, request.pic_comments, now)

            if verification.verification_type == VerificationType.PICKUP:
                await self._apply_pickup_outcome(verification, now)

            verification = await self._verification_repo.update(verification, expected_lock_version)

        logger.info(
            "Inspection finalized",
            extra={
                "verification_id": verification.id,
                "booking_id": verification.booking_id,
                "verification_type": verification.verification_type.value,
                "outcome": verification.status.value,
            },
        )
        return verification

    async def _apply_pickup_outcome(self, verification: PicVerification, now) -> None:
        booking = await load_booking(self._booking_repo, verification.booking_id)
        expected_lock_version = booking.lock_version
        previous = booking.status
        if verification.status == VerificationStatus.RECHECK:
            booking.request_recheck(verification.pic_id, verification.pic_comments, now)
            await self._booking_repo.update(booking, expected_lock_version)
            logger.info(
                "Pickup inspection sent back for recheck",
                extra={"booking_id": booking.id, "verification_id": verification.id},
            )
            return
        if verification.status == VerificationStatus.APPROVED:
            booking.approve_pickup(verification.pic_id, verification.pic_comments, now)
            event = BookingEvent.PIC_APPROVED
        else:
            booking.deny_pickup(verification.pic_id, verification.pic_comments, now)
            event = BookingEvent.PIC_REJECTED
        await self._booking_repo.update(booking, expected_lock_version)
        log_transition(booking, previous, event.value)
