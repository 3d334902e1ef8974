from decimal import Decimal

import pytest

from booking_engine.domain.entities.booking import MilestoneStatus
from booking_engine.domain.entities.payment import PaymentEventStatus, PaymentMilestone
from booking_engine.domain.errors import BookingNotFoundError, IllegalTransitionError
from booking_engine.domain.services.state_machine import BookingStatus


class TestAdvance:
    @pytest.mark.asyncio
    async def test_duplicate_event_is_a_no_op(self, driver, use_cases, codes):
        booking = await driver.create()
        first = await driver.pay(booking.id, PaymentMilestone.ADVANCE, "adv-1")
        again = await driver.pay(booking.id, PaymentMilestone.ADVANCE, "adv-1")

        assert first.applied
        assert first.payment.amount == Decimal("1250.00")
        assert not again.applied
        assert again.booking.lock_version == first.booking.lock_version
        assert len(codes.issued) == 1
        assert len(await use_cases["get_booking"].list_payments(booking.id)) == 1

    @pytest.mark.asyncio
    async def test_different_reference_is_rejected(self, driver):
        booking = await driver.create()
        await driver.pay(booking.id, PaymentMilestone.ADVANCE, "adv-1")
        with pytest.raises(IllegalTransitionError):
            await driver.pay(booking.id, PaymentMilestone.ADVANCE, "adv-2")

    @pytest.mark.asyncio
    async def test_failure_keeps_booking_pending(self, driver):
        booking = await driver.create()
        outcome = await driver.pay(
            booking.id, PaymentMilestone.ADVANCE, "adv-x", status=PaymentEventStatus.FAILED
        )
        assert outcome.booking.status == BookingStatus.PENDING
        assert outcome.booking.advance_payment_status == MilestoneStatus.FAILED
        assert outcome.booking.otp_code is None

        retried = await driver.pay(booking.id, PaymentMilestone.ADVANCE, "adv-y")
        assert retried.booking.status == BookingStatus.ADVANCE_PAID

    @pytest.mark.asyncio
    async def test_unknown_booking(self, driver):
        with pytest.raises(BookingNotFoundError):
            await driver.pay(404, PaymentMilestone.ADVANCE, "adv-1")


class TestFinal:
    @pytest.mark.asyncio
    async def test_final_before_advance_is_illegal(self, driver):
        booking = await driver.create()
        with pytest.raises(IllegalTransitionError):
            await driver.pay(booking.id, PaymentMilestone.FINAL, "fin-1")

    @pytest.mark.asyncio
    async def test_final_records_remaining_amount(self, driver):
        booking = await driver.active()
        outcome = await driver.pay(booking.id, PaymentMilestone.FINAL, "fin-1")

        assert outcome.applied
        assert outcome.payment.amount == booking.remaining_amount
        assert outcome.booking.final_payment_status == MilestoneStatus.COMPLETED
        assert outcome.booking.status == BookingStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_final_failure_after_completion_is_rejected(self, driver):
        booking = await driver.active()
        await driver.pay(booking.id, PaymentMilestone.FINAL, "fin-1")
        with pytest.raises(IllegalTransitionError):
            await driver.pay(
                booking.id, PaymentMilestone.FINAL, "fin-1", status=PaymentEventStatus.FAILED
            )
