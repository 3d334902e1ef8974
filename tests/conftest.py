"""
Shared fixtures.

Every test gets a fresh in-memory bundle seeded with a small catalogue, a
frozen clock and predictable OTP codes. ``driver`` walks bookings through the
lifecycle so tests can start from any status.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from booking_engine.api.dependencies import build_in_memory_bundle, build_use_cases, get_bundle
from booking_engine.api.schemas.bookings import (
    CreateBookingRequest,
    GenerateOtpRequest,
    SubmitConfirmationRequest,
    VerifyOtpRequest,
)
from booking_engine.api.schemas.pic import CreateVerificationRequest, FinalizeVerificationRequest
from booking_engine.application.interfaces.clock import FakeClock
from booking_engine.application.interfaces.code_generator import FakeOtpCodeGenerator
from booking_engine.config import Settings
from booking_engine.domain.entities.car import Car, CarStatus
from booking_engine.domain.entities.coupon import Coupon, DiscountType
from booking_engine.domain.entities.payment import PaymentEvent, PaymentEventStatus, PaymentMilestone
from booking_engine.domain.entities.pic_verification import VerificationStatus, VerificationType
from booking_engine.domain.entities.topup import Topup
from booking_engine.main import app

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
USER_ID = 7
OTHER_USER_ID = 8
PIC_ID = 501
PARKING_ID = 1

SWIFT_ID = 1  # 1000/day, insurance 500
INNOVA_ID = 2  # 2500/day list, 2200/day discounted, insurance 800
NEXON_ID = 3  # in maintenance

SIX_HOURS_TOPUP_ID = 1
ONE_DAY_TOPUP_ID = 2
RETIRED_TOPUP_ID = 3


def seed_catalogue(bundle: dict) -> None:
    cars = bundle["car_reader"]
    cars.add(Car(id=SWIFT_ID, name="Swift Dzire", price=Decimal("1000.00"),
                 insurance_amount=Decimal("500.00"), parking_id=PARKING_ID))
    cars.add(Car(id=INNOVA_ID, name="Innova Crysta", price=Decimal("2500.00"),
                 discount_price=Decimal("2200.00"), insurance_amount=Decimal("800.00"),
                 parking_id=PARKING_ID))
    cars.add(Car(id=NEXON_ID, name="Nexon EV", price=Decimal("1800.00"),
                 status=CarStatus.MAINTENANCE, parking_id=2))

    coupons = bundle["coupon_repo"]
    coupons.add(Coupon(code="SUMMER25", name="Summer sale", discount_type=DiscountType.PERCENTAGE,
                       discount_amount=Decimal("25"), min_booking_amount=Decimal("2000"),
                       max_discount_amount=Decimal("1000"), start_date=NOW - timedelta(days=1),
                       end_date=NOW + timedelta(days=90), usage_limit=100, per_user_limit=1))
    coupons.add(Coupon(code="FLAT300", name="Flat 300", discount_type=DiscountType.FIXED,
                       discount_amount=Decimal("300"), per_user_limit=2))
    coupons.add(Coupon(code="LASTONE", name="Single use", discount_type=DiscountType.FIXED,
                       discount_amount=Decimal("100"), usage_limit=1, per_user_limit=5))
    coupons.add(Coupon(code="WINTER10", name="Winter", discount_type=DiscountType.PERCENTAGE,
                       discount_amount=Decimal("10"), start_date=NOW - timedelta(days=120),
                       end_date=NOW - timedelta(days=30)))

    topups = bundle["topup_repo"]
    topups.add(Topup(id=SIX_HOURS_TOPUP_ID, name="Extra 6 hours", duration_hours=6, price=Decimal("400.00")))
    topups.add(Topup(id=ONE_DAY_TOPUP_ID, name="Extra day", duration_hours=24, price=Decimal("1200.00")))
    topups.add(Topup(id=RETIRED_TOPUP_ID, name="Old offer", duration_hours=3, price=Decimal("100.00"),
                     is_active=False))


def booking_payload(**overrides) -> dict:
    start = NOW + timedelta(days=1)
    payload = {
        "user_id": USER_ID,
        "car_id": SWIFT_ID,
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=2)).isoformat(),
        "delivery_type": "pickup",
    }
    payload.update(overrides)
    return payload


class BookingDriver:
    """Moves a booking through the lifecycle with the real use cases."""

    def __init__(self, use_cases: dict, clock: FakeClock):
        self.use_cases = use_cases
        self.clock = clock

    async def create(self, **overrides):
        request = CreateBookingRequest(**booking_payload(**overrides))
        return await self.use_cases["create_booking"].execute(request)

    async def pay(self, booking_id: int, milestone: PaymentMilestone, reference: str, **kwargs):
        return await self.use_cases["handle_payment_event"].execute(
            PaymentEvent(
                booking_id=booking_id,
                milestone=milestone,
                status=kwargs.pop("status", PaymentEventStatus.COMPLETED),
                reference_id=reference,
                **kwargs,
            )
        )

    async def advance_paid(self, **overrides):
        created = await self.create(**overrides)
        outcome = await self.pay(created.id, PaymentMilestone.ADVANCE, f"adv-{created.id}")
        return outcome.booking

    async def inspect(self, booking, verification_type: VerificationType, outcome=VerificationStatus.APPROVED):
        verification = await self.use_cases["submit_verification"].execute(
            CreateVerificationRequest(
                car_id=booking.car_id,
                parking_id=PARKING_ID,
                pic_id=PIC_ID,
                booking_id=booking.id,
                verification_type=verification_type,
            )
        )
        return await self.use_cases["finalize_verification"].execute(
            verification.id, FinalizeVerificationRequest(pic_id=PIC_ID, status=outcome)
        )

    async def confirmed(self, **overrides):
        booking = await self.advance_paid(**overrides)
        await self.use_cases["submit_confirmation"].execute(
            booking.id,
            SubmitConfirmationRequest(user_id=booking.user_id, car_condition_images=["front.jpg"]),
        )
        await self.inspect(booking, VerificationType.PICKUP)
        return await self.use_cases["get_booking"].execute(booking.id)

    async def active(self, **overrides):
        booking = await self.confirmed(**overrides)
        self.clock.set_time(booking.effective_pickup_date - timedelta(hours=1))
        booking = await self.use_cases["generate_otp"].execute(
            booking.id, GenerateOtpRequest(user_id=booking.user_id)
        )
        return await self.use_cases["verify_otp"].execute(
            booking.id, VerifyOtpRequest(otp_code=booking.otp_code, verified_by=PIC_ID)
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def codes() -> FakeOtpCodeGenerator:
    return FakeOtpCodeGenerator(start=1000)


@pytest.fixture
def bundle(clock, codes) -> dict:
    bundle = build_in_memory_bundle(clock=clock, code_generator=codes)
    seed_catalogue(bundle)
    return bundle


@pytest.fixture
def settings() -> Settings:
    return Settings(use_in_memory=True, max_reschedule_count=3)


@pytest.fixture
def use_cases(bundle, settings) -> dict:
    return build_use_cases(bundle, settings)


@pytest.fixture
def driver(use_cases, clock) -> BookingDriver:
    return BookingDriver(use_cases, clock)


@pytest.fixture
def client(bundle) -> Generator[TestClient, None, None]:
    """TestClient wired to the per-test bundle instead of the process-wide one."""
    app.dependency_overrides[get_bundle] = lambda: bundle
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: tests that hit the SQL adapters")
    config.addinivalue_line("markers", "slow: tests that may take several seconds")
