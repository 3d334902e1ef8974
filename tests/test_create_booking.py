from datetime import timedelta
from decimal import Decimal

import pytest

from booking_engine.api.schemas.bookings import CancelBookingRequest, CreateBookingRequest
from booking_engine.api.schemas.coupons import ValidateCouponRequest
from booking_engine.domain.errors import (
    AvailabilityConflictError,
    CarNotFoundError,
    CouponInvalidError,
    IdempotencyConflictError,
)
from booking_engine.domain.services.state_machine import BookingStatus
from conftest import INNOVA_ID, NEXON_ID, NOW, OTHER_USER_ID, SWIFT_ID, USER_ID, booking_payload


def _request(**overrides) -> CreateBookingRequest:
    return CreateBookingRequest(**booking_payload(**overrides))


class TestPricing:
    @pytest.mark.asyncio
    async def test_defaults_to_car_insurance(self, use_cases):
        booking = await use_cases["create_booking"].execute(_request())

        assert booking.status == BookingStatus.PENDING.value
        assert booking.base_price == Decimal("2000.00")
        assert booking.insurance_amount == Decimal("500.00")
        assert booking.delivery_charges == Decimal("0.00")
        assert booking.total_price == Decimal("2500.00")
        assert booking.advance_amount == Decimal("1250.00")
        assert booking.remaining_amount == Decimal("1250.00")
        assert booking.advance_amount + booking.remaining_amount == booking.total_price

    @pytest.mark.asyncio
    async def test_coupon_applies_to_base_price(self, use_cases):
        booking = await use_cases["create_booking"].execute(
            _request(
                delivery_type="delivery",
                delivery_address="12 MG Road",
                delivery_charges="100",
                coupon_code="summer25",
            )
        )

        assert booking.discount_amount == Decimal("500.00")
        assert booking.total_price == Decimal("2100.00")
        assert booking.advance_amount == Decimal("1050.00")
        assert booking.remaining_amount == Decimal("1050.00")
        assert booking.coupon_id is not None

    @pytest.mark.asyncio
    async def test_delivery_charges_ignored_for_pickup(self, use_cases):
        booking = await use_cases["create_booking"].execute(_request(delivery_charges="250"))
        assert booking.delivery_charges == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_discounted_daily_rate(self, use_cases):
        booking = await use_cases["create_booking"].execute(
            _request(car_id=INNOVA_ID, insurance_amount="0")
        )
        assert booking.base_price == Decimal("4400.00")
        assert booking.total_price == Decimal("4400.00")

    @pytest.mark.asyncio
    async def test_partial_day_bills_full_day(self, use_cases):
        start = NOW + timedelta(days=1)
        booking = await use_cases["create_booking"].execute(
            _request(
                start_date=start.isoformat(),
                end_date=(start + timedelta(hours=25)).isoformat(),
                insurance_amount="0",
            )
        )
        assert booking.base_price == Decimal("2000.00")


class TestCoupons:
    @pytest.mark.asyncio
    async def test_usage_count_moves_once(self, use_cases, bundle):
        await use_cases["create_booking"].execute(_request(coupon_code="FLAT300"))
        coupon = await bundle["coupon_repo"].get_by_code("FLAT300")
        assert coupon.usage_count == 1

    @pytest.mark.asyncio
    async def test_per_user_limit(self, use_cases):
        await use_cases["create_booking"].execute(_request(coupon_code="SUMMER25"))
        later = NOW + timedelta(days=10)
        with pytest.raises(CouponInvalidError) as exc_info:
            await use_cases["create_booking"].execute(
                _request(
                    coupon_code="SUMMER25",
                    start_date=later.isoformat(),
                    end_date=(later + timedelta(days=3)).isoformat(),
                )
            )
        assert exc_info.value.reason == CouponInvalidError.PER_USER_LIMIT_REACHED

    @pytest.mark.asyncio
    async def test_below_minimum(self, use_cases):
        start = NOW + timedelta(days=1)
        with pytest.raises(CouponInvalidError) as exc_info:
            await use_cases["create_booking"].execute(
                _request(
                    coupon_code="SUMMER25",
                    end_date=(start + timedelta(days=1)).isoformat(),
                )
            )
        assert exc_info.value.reason == CouponInvalidError.BELOW_MINIMUM

    @pytest.mark.asyncio
    async def test_rejected_coupon_leaves_no_booking(self, use_cases, bundle):
        with pytest.raises(CouponInvalidError):
            await use_cases["create_booking"].execute(_request(coupon_code="WINTER10"))
        assert bundle["booking_repo"].bookings == {}

    @pytest.mark.asyncio
    async def test_exhausted_coupon(self, use_cases):
        await use_cases["create_booking"].execute(_request(coupon_code="LASTONE"))
        with pytest.raises(CouponInvalidError) as exc_info:
            await use_cases["create_booking"].execute(
                _request(coupon_code="LASTONE", car_id=INNOVA_ID, user_id=OTHER_USER_ID)
            )
        assert exc_info.value.reason == CouponInvalidError.EXHAUSTED

    @pytest.mark.asyncio
    async def test_validate_does_not_consume(self, use_cases, bundle):
        validation = await use_cases["validate_coupon"].execute(
            ValidateCouponRequest(code="SUMMER25", booking_amount="8000", user_id=USER_ID)
        )
        assert validation.discount_amount == Decimal("1000.00")
        assert validation.final_amount == Decimal("7000.00")
        coupon = await bundle["coupon_repo"].get_by_code("SUMMER25")
        assert coupon.usage_count == 0

    @pytest.mark.asyncio
    async def test_unknown_code(self, use_cases):
        with pytest.raises(CouponInvalidError) as exc_info:
            await use_cases["validate_coupon"].execute(
                ValidateCouponRequest(code="NOPE", booking_amount="1000")
            )
        assert exc_info.value.reason == CouponInvalidError.NOT_FOUND


class TestAvailability:
    @pytest.mark.asyncio
    async def test_overlapping_window_conflicts(self, use_cases):
        await use_cases["create_booking"].execute(_request())
        start = NOW + timedelta(days=2)
        with pytest.raises(AvailabilityConflictError):
            await use_cases["create_booking"].execute(
                _request(
                    user_id=OTHER_USER_ID,
                    start_date=start.isoformat(),
                    end_date=(start + timedelta(days=2)).isoformat(),
                )
            )

    @pytest.mark.asyncio
    async def test_back_to_back_is_allowed(self, use_cases):
        first = await use_cases["create_booking"].execute(_request())
        second = await use_cases["create_booking"].execute(
            _request(
                user_id=OTHER_USER_ID,
                start_date=first.end_date.isoformat(),
                end_date=(first.end_date + timedelta(days=1)).isoformat(),
            )
        )
        assert second.id != first.id

    @pytest.mark.asyncio
    async def test_car_in_maintenance(self, use_cases):
        with pytest.raises(AvailabilityConflictError):
            await use_cases["create_booking"].execute(_request(car_id=NEXON_ID))

    @pytest.mark.asyncio
    async def test_unknown_car(self, use_cases):
        with pytest.raises(CarNotFoundError):
            await use_cases["create_booking"].execute(_request(car_id=999))

    @pytest.mark.asyncio
    async def test_cancelled_booking_frees_the_car(self, use_cases, driver):
        booking = await driver.create()
        await use_cases["cancel_booking"].execute(
            booking.id, CancelBookingRequest(user_id=USER_ID)
        )
        again = await driver.create(user_id=OTHER_USER_ID)
        assert again.status == BookingStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_is_available_ignores_the_excluded_booking(self, use_cases):
        booking = await use_cases["create_booking"].execute(_request())
        checker = use_cases["check_availability"]
        start, end = booking.start_date, booking.end_date

        assert await checker.is_available(SWIFT_ID, start, end) is False
        assert await checker.is_available(SWIFT_ID, start, end, exclude_booking_id=booking.id) is True

    @pytest.mark.asyncio
    async def test_check_raises_on_conflict(self, use_cases):
        booking = await use_cases["create_booking"].execute(_request())
        with pytest.raises(AvailabilityConflictError):
            await use_cases["check_availability"].check(
                SWIFT_ID, booking.start_date, booking.end_date
            )


class TestIdempotency:
    @pytest.mark.asyncio
    async def test_replay_returns_stored_response(self, use_cases, bundle):
        first = await use_cases["create_booking"].execute(_request(), idem_key="abc")
        replay = await use_cases["create_booking"].execute(_request(), idem_key="abc")

        assert replay.id == first.id
        assert len(bundle["booking_repo"].bookings) == 1

    @pytest.mark.asyncio
    async def test_same_key_different_payload(self, use_cases):
        await use_cases["create_booking"].execute(_request(), idem_key="abc")
        with pytest.raises(IdempotencyConflictError):
            await use_cases["create_booking"].execute(_request(car_id=INNOVA_ID), idem_key="abc")
