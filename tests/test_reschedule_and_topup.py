from datetime import timedelta
from decimal import Decimal

import pytest

from booking_engine.api.schemas.bookings import ApplyTopupRequest, RescheduleBookingRequest
from booking_engine.domain.entities.payment import PaymentEventStatus, PaymentMilestone
from booking_engine.domain.entities.topup import TopupPaymentStatus
from booking_engine.domain.errors import (
    AvailabilityConflictError,
    BookingAccessDeniedError,
    IllegalTransitionError,
    RescheduleLimitExceededError,
    TopupNotFoundError,
    ValidationError,
)
from booking_engine.domain.services.state_machine import BookingStatus
from conftest import (
    NOW,
    ONE_DAY_TOPUP_ID,
    OTHER_USER_ID,
    RETIRED_TOPUP_ID,
    SIX_HOURS_TOPUP_ID,
    USER_ID,
)


def _move(booking, days: int, user_id: int = USER_ID) -> RescheduleBookingRequest:
    shift = timedelta(days=days)
    return RescheduleBookingRequest(
        user_id=user_id,
        new_pickup_date=booking.start_date + shift,
        new_start_date=booking.start_date + shift,
        new_end_date=booking.end_date + shift,
    )


class TestReschedule:
    @pytest.mark.asyncio
    async def test_moves_window_and_keeps_price(self, use_cases, driver):
        booking = await driver.create()
        moved = await use_cases["reschedule_booking"].execute(booking.id, _move(booking, 3))

        assert moved.start_date == booking.start_date + timedelta(days=3)
        assert moved.original_pickup_date == booking.pickup_date
        assert moved.reschedule_count == 1
        assert moved.total_price == booking.total_price

    @pytest.mark.asyncio
    async def test_original_pickup_is_set_once(self, use_cases, driver):
        booking = await driver.create()
        await use_cases["reschedule_booking"].execute(booking.id, _move(booking, 3))
        moved = await use_cases["reschedule_booking"].execute(booking.id, _move(booking, 5))
        assert moved.original_pickup_date == booking.pickup_date
        assert moved.reschedule_count == 2

    @pytest.mark.asyncio
    async def test_limit(self, use_cases, driver):
        booking = await driver.create()
        for days in (3, 4, 5):
            await use_cases["reschedule_booking"].execute(booking.id, _move(booking, days))
        with pytest.raises(RescheduleLimitExceededError):
            await use_cases["reschedule_booking"].execute(booking.id, _move(booking, 6))

    @pytest.mark.asyncio
    async def test_conflict_with_other_booking(self, use_cases, driver):
        booking = await driver.create()
        other_start = booking.start_date + timedelta(days=10)
        await driver.create(
            user_id=OTHER_USER_ID,
            start_date=other_start.isoformat(),
            end_date=(other_start + timedelta(days=2)).isoformat(),
        )
        with pytest.raises(AvailabilityConflictError):
            await use_cases["reschedule_booking"].execute(booking.id, _move(booking, 10))

    @pytest.mark.asyncio
    async def test_overlap_with_own_window_is_fine(self, use_cases, driver):
        booking = await driver.create()
        moved = await use_cases["reschedule_booking"].execute(booking.id, _move(booking, 1))
        assert moved.reschedule_count == 1

    @pytest.mark.asyncio
    async def test_not_after_pic_approval(self, use_cases, driver):
        booking = await driver.confirmed()
        with pytest.raises(IllegalTransitionError):
            await use_cases["reschedule_booking"].execute(booking.id, _move(booking, 3))

    @pytest.mark.asyncio
    async def test_only_owner(self, use_cases, driver):
        booking = await driver.create()
        with pytest.raises(BookingAccessDeniedError):
            await use_cases["reschedule_booking"].execute(
                booking.id, _move(booking, 3, user_id=OTHER_USER_ID)
            )

    @pytest.mark.asyncio
    async def test_otp_regenerated_when_expiry_moves(self, use_cases, driver, clock, codes):
        booking = await driver.advance_paid()
        old_code = booking.otp_code

        new_pickup = NOW + timedelta(hours=1)
        moved = await use_cases["reschedule_booking"].execute(
            booking.id,
            RescheduleBookingRequest(
                user_id=USER_ID,
                new_pickup_date=new_pickup,
                new_start_date=new_pickup,
                new_end_date=new_pickup + timedelta(days=2),
            ),
        )
        assert moved.otp_code != old_code
        assert moved.otp_code == codes.issued[-1]
        assert moved.otp_expires_at == new_pickup - timedelta(minutes=30)

    @pytest.mark.asyncio
    async def test_otp_kept_within_tolerance(self, use_cases, driver, codes):
        booking = await driver.advance_paid()
        moved = await use_cases["reschedule_booking"].execute(booking.id, _move(booking, 2))
        assert moved.otp_code == booking.otp_code
        assert len(codes.issued) == 1

    @pytest.mark.asyncio
    async def test_otp_kept_when_pickup_unchanged(self, use_cases, driver, clock, codes):
        booking = await driver.advance_paid()
        clock.advance(minutes=30)

        moved = await use_cases["reschedule_booking"].execute(
            booking.id,
            RescheduleBookingRequest(
                user_id=USER_ID,
                new_pickup_date=booking.effective_pickup_date,
                new_end_date=booking.end_date + timedelta(days=1),
            ),
        )
        assert moved.end_date == booking.end_date + timedelta(days=1)
        assert moved.otp_code == booking.otp_code
        assert moved.otp_expires_at == booking.otp_expires_at
        assert len(codes.issued) == 1

    @pytest.mark.asyncio
    async def test_pickup_outside_current_window(self, use_cases, driver):
        booking = await driver.create()
        with pytest.raises(ValidationError):
            await use_cases["reschedule_booking"].execute(
                booking.id,
                RescheduleBookingRequest(
                    user_id=USER_ID, new_pickup_date=booking.end_date + timedelta(hours=1)
                ),
            )
        reloaded = await use_cases["get_booking"].execute(booking.id)
        assert reloaded.reschedule_count == 0


class TestTopups:
    @pytest.mark.asyncio
    async def test_paid_topup_extends_rental(self, use_cases, driver):
        booking = await driver.active()
        row = await use_cases["apply_topup"].execute(
            booking.id, ApplyTopupRequest(user_id=USER_ID, topup_id=ONE_DAY_TOPUP_ID)
        )
        assert row.original_end_date == booking.end_date
        assert row.new_end_date == booking.end_date + timedelta(hours=24)
        assert row.payment_status == TopupPaymentStatus.PENDING

        unpaid = await use_cases["get_booking"].execute(booking.id)
        assert unpaid.extension_till is None

        outcome = await driver.pay(
            booking.id, PaymentMilestone.TOPUP, "top-1", booking_topup_id=row.id
        )
        extended = outcome.booking
        assert extended.extension_till == row.new_end_date
        assert extended.extension_price == Decimal("1200.00")
        assert extended.extension_hours == 24
        assert extended.effective_end_date == row.new_end_date
        assert extended.end_date == booking.end_date
        assert outcome.payment.amount == Decimal("1200.00")

    @pytest.mark.asyncio
    async def test_topups_chain(self, use_cases, driver):
        booking = await driver.active()
        request = ApplyTopupRequest(user_id=USER_ID, topup_id=SIX_HOURS_TOPUP_ID)
        first = await use_cases["apply_topup"].execute(booking.id, request)
        second = await use_cases["apply_topup"].execute(booking.id, request)

        assert second.original_end_date == first.new_end_date
        assert second.new_end_date == booking.end_date + timedelta(hours=12)

    @pytest.mark.asyncio
    async def test_failed_payment_leaves_booking_alone(self, use_cases, driver):
        booking = await driver.active()
        row = await use_cases["apply_topup"].execute(
            booking.id, ApplyTopupRequest(user_id=USER_ID, topup_id=SIX_HOURS_TOPUP_ID)
        )
        outcome = await driver.pay(
            booking.id,
            PaymentMilestone.TOPUP,
            "top-1",
            status=PaymentEventStatus.FAILED,
            booking_topup_id=row.id,
        )
        assert outcome.booking.extension_till is None
        assert outcome.booking.lock_version == booking.lock_version

        retry = await use_cases["apply_topup"].execute(
            booking.id, ApplyTopupRequest(user_id=USER_ID, topup_id=SIX_HOURS_TOPUP_ID)
        )
        assert retry.original_end_date == booking.end_date

    @pytest.mark.asyncio
    async def test_only_active_bookings(self, use_cases, driver):
        booking = await driver.confirmed()
        with pytest.raises(IllegalTransitionError):
            await use_cases["apply_topup"].execute(
                booking.id, ApplyTopupRequest(user_id=USER_ID, topup_id=SIX_HOURS_TOPUP_ID)
            )

    @pytest.mark.asyncio
    async def test_unknown_and_inactive_topups(self, use_cases, driver):
        booking = await driver.active()
        with pytest.raises(TopupNotFoundError):
            await use_cases["apply_topup"].execute(
                booking.id, ApplyTopupRequest(user_id=USER_ID, topup_id=99)
            )
        with pytest.raises(ValidationError):
            await use_cases["apply_topup"].execute(
                booking.id, ApplyTopupRequest(user_id=USER_ID, topup_id=RETIRED_TOPUP_ID)
            )

    @pytest.mark.asyncio
    async def test_extension_blocks_next_renter(self, use_cases, driver):
        booking = await driver.active()
        row = await use_cases["apply_topup"].execute(
            booking.id, ApplyTopupRequest(user_id=USER_ID, topup_id=ONE_DAY_TOPUP_ID)
        )
        await driver.pay(booking.id, PaymentMilestone.TOPUP, "top-1", booking_topup_id=row.id)

        with pytest.raises(AvailabilityConflictError):
            await driver.create(
                user_id=OTHER_USER_ID,
                start_date=booking.end_date.isoformat(),
                end_date=(booking.end_date + timedelta(days=1)).isoformat(),
            )
        assert (await use_cases["get_booking"].execute(booking.id)).status == BookingStatus.ACTIVE
