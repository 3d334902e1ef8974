import logging
from datetime import timedelta

import pytest

from booking_engine.api.schemas.bookings import (
    CancelBookingRequest,
    ConfirmReturnRequest,
    GenerateOtpRequest,
    SubmitConfirmationRequest,
    VerifyOtpRequest,
)
from booking_engine.domain.entities.booking import ConfirmationStatus, MilestoneStatus
from booking_engine.domain.entities.payment import PaymentMilestone
from booking_engine.domain.entities.pic_verification import VerificationStatus, VerificationType
from booking_engine.domain.errors import (
    BookingAccessDeniedError,
    IllegalTransitionError,
    OtpError,
)
from booking_engine.domain.services.state_machine import BookingStatus
from conftest import OTHER_USER_ID, PIC_ID, USER_ID


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_full_lifecycle(self, use_cases, driver, clock, caplog):
        caplog.set_level(logging.INFO, logger="booking_engine.transitions")

        booking = await driver.active()
        assert booking.status == BookingStatus.ACTIVE
        assert booking.otp_verified
        assert booking.actual_pickup_date == clock.now()

        await driver.pay(booking.id, PaymentMilestone.FINAL, "final-1")
        await driver.inspect(booking, VerificationType.RETURN)
        clock.advance(days=2)

        booking = await use_cases["confirm_return"].execute(
            booking.id, ConfirmReturnRequest(pic_id=PIC_ID, return_images=["back.jpg"])
        )
        assert booking.status == BookingStatus.COMPLETED
        assert booking.actual_dropoff_date == clock.now()
        assert booking.return_condition == "good"

        transitions = [
            (r.from_status, r.to_status)
            for r in caplog.records
            if r.name == "booking_engine.transitions"
        ]
        assert transitions == [
            ("pending", "advance_paid"),
            ("advance_paid", "confirmed"),
            ("confirmed", "active"),
            ("active", "completed"),
        ]

    @pytest.mark.asyncio
    async def test_advance_payment_issues_otp(self, driver, codes, clock):
        booking = await driver.advance_paid()

        assert booking.status == BookingStatus.ADVANCE_PAID
        assert booking.advance_payment_status == MilestoneStatus.COMPLETED
        assert booking.otp_code == codes.issued[-1]
        assert booking.otp_expires_at == clock.now() + timedelta(minutes=15)


class TestConfirmation:
    @pytest.mark.asyncio
    async def test_requires_advance_payment(self, use_cases, driver):
        booking = await driver.create()
        with pytest.raises(IllegalTransitionError):
            await use_cases["submit_confirmation"].execute(
                booking.id, SubmitConfirmationRequest(user_id=USER_ID)
            )

    @pytest.mark.asyncio
    async def test_sets_pending_approval(self, use_cases, driver, clock):
        booking = await driver.advance_paid()
        booking = await use_cases["submit_confirmation"].execute(
            booking.id,
            SubmitConfirmationRequest(
                user_id=USER_ID,
                car_condition_images=["a.jpg", "b.jpg"],
                tools=[{"name": "jack", "image": "jack.jpg"}],
            ),
        )
        assert booking.user_confirmed
        assert booking.user_confirmed_at == clock.now()
        assert booking.confirmation_status == ConfirmationStatus.PENDING_APPROVAL
        assert booking.tools == [{"name": "jack", "image": "jack.jpg"}]

    @pytest.mark.asyncio
    async def test_only_owner_can_confirm(self, use_cases, driver):
        booking = await driver.advance_paid()
        with pytest.raises(BookingAccessDeniedError):
            await use_cases["submit_confirmation"].execute(
                booking.id, SubmitConfirmationRequest(user_id=OTHER_USER_ID)
            )


class TestOtp:
    @pytest.mark.asyncio
    async def test_expired_otp_then_resend(self, use_cases, driver, clock, codes):
        booking = await driver.confirmed()
        clock.advance(minutes=16)

        with pytest.raises(OtpError) as exc_info:
            await use_cases["verify_otp"].execute(
                booking.id, VerifyOtpRequest(otp_code=booking.otp_code)
            )
        assert exc_info.value.reason == OtpError.EXPIRED

        resent = await use_cases["generate_otp"].execute(
            booking.id, GenerateOtpRequest(user_id=USER_ID)
        )
        assert resent.otp_code == codes.issued[-1]
        assert resent.otp_code != booking.otp_code

        active = await use_cases["verify_otp"].execute(
            booking.id, VerifyOtpRequest(otp_code=resent.otp_code, verified_by=PIC_ID)
        )
        assert active.status == BookingStatus.ACTIVE
        assert active.otp_verified_by == PIC_ID

    @pytest.mark.asyncio
    async def test_wrong_code_does_not_start_rental(self, use_cases, driver):
        booking = await driver.confirmed()
        with pytest.raises(OtpError) as exc_info:
            await use_cases["verify_otp"].execute(booking.id, VerifyOtpRequest(otp_code="0000"))
        assert exc_info.value.reason == OtpError.MISMATCH

        booking = await use_cases["get_booking"].execute(booking.id)
        assert booking.status == BookingStatus.CONFIRMED
        assert not booking.otp_verified

    @pytest.mark.asyncio
    async def test_valid_otp_before_pic_approval_is_illegal(self, use_cases, driver):
        booking = await driver.advance_paid()
        with pytest.raises(IllegalTransitionError):
            await use_cases["verify_otp"].execute(
                booking.id, VerifyOtpRequest(otp_code=booking.otp_code)
            )

    @pytest.mark.asyncio
    async def test_code_is_single_use(self, use_cases, driver):
        booking = await driver.active()
        with pytest.raises(OtpError) as exc_info:
            await use_cases["verify_otp"].execute(
                booking.id, VerifyOtpRequest(otp_code=booking.otp_code)
            )
        assert exc_info.value.reason == OtpError.ALREADY_VERIFIED

    @pytest.mark.asyncio
    async def test_no_otp_before_advance(self, use_cases, driver):
        booking = await driver.create()
        with pytest.raises(IllegalTransitionError):
            await use_cases["generate_otp"].execute(
                booking.id, GenerateOtpRequest(user_id=USER_ID)
            )


class TestReturn:
    @pytest.mark.asyncio
    async def test_blocked_without_inspection_or_final_payment(self, use_cases, driver, caplog):
        booking = await driver.active()

        with caplog.at_level(logging.WARNING):
            with pytest.raises(IllegalTransitionError) as exc_info:
                await use_cases["confirm_return"].execute(booking.id, ConfirmReturnRequest())
        assert "return inspection" in exc_info.value.message
        assert "final payment" in exc_info.value.message
        assert any(r.levelno == logging.WARNING for r in caplog.records)

        booking = await use_cases["get_booking"].execute(booking.id)
        assert booking.status == BookingStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_rejected_return_inspection_blocks(self, use_cases, driver):
        booking = await driver.active()
        await driver.pay(booking.id, PaymentMilestone.FINAL, "final-1")
        await driver.inspect(booking, VerificationType.RETURN, VerificationStatus.REJECTED)

        with pytest.raises(IllegalTransitionError) as exc_info:
            await use_cases["confirm_return"].execute(booking.id, ConfirmReturnRequest())
        assert "approved return inspection" in exc_info.value.message


class TestCancel:
    @pytest.mark.asyncio
    async def test_user_cancels_before_handover(self, use_cases, driver):
        booking = await driver.confirmed()
        cancelled = await use_cases["cancel_booking"].execute(
            booking.id, CancelBookingRequest(user_id=USER_ID)
        )
        assert cancelled.status == BookingStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_user_cannot_cancel_after_handover(self, use_cases, driver):
        booking = await driver.active()
        with pytest.raises(IllegalTransitionError):
            await use_cases["cancel_booking"].execute(
                booking.id, CancelBookingRequest(user_id=USER_ID)
            )

    @pytest.mark.asyncio
    async def test_admin_can_cancel_active(self, use_cases, driver):
        booking = await driver.active()
        cancelled = await use_cases["cancel_booking"].execute(
            booking.id, CancelBookingRequest(user_id=1, as_admin=True)
        )
        assert cancelled.status == BookingStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_other_user_cannot_cancel(self, use_cases, driver):
        booking = await driver.create()
        with pytest.raises(BookingAccessDeniedError):
            await use_cases["cancel_booking"].execute(
                booking.id, CancelBookingRequest(user_id=OTHER_USER_ID)
            )

    @pytest.mark.asyncio
    async def test_terminal_booking_stays_terminal(self, use_cases, driver):
        booking = await driver.create()
        request = CancelBookingRequest(user_id=USER_ID)
        await use_cases["cancel_booking"].execute(booking.id, request)

        with pytest.raises(IllegalTransitionError):
            await use_cases["cancel_booking"].execute(booking.id, request)
        with pytest.raises(IllegalTransitionError):
            await driver.pay(booking.id, PaymentMilestone.ADVANCE, "late-pay")
