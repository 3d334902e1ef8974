"""Ports of the application layer."""

from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.car_reader import CarReader
from booking_engine.application.interfaces.clock import Clock, FakeClock, SystemClock
from booking_engine.application.interfaces.code_generator import (
    FakeOtpCodeGenerator,
    OtpCodeGenerator,
    RandomOtpCodeGenerator,
)
from booking_engine.application.interfaces.coupon_repo import CouponRepo
from booking_engine.application.interfaces.idempotency_repo import (
    IdempotencyRecord,
    IdempotencyRepo,
)
from booking_engine.application.interfaces.payment_repo import PaymentRepo
from booking_engine.application.interfaces.pic_verification_repo import PicVerificationRepo
from booking_engine.application.interfaces.topup_repo import TopupRepo
from booking_engine.application.interfaces.transaction_manager import TransactionManager

__all__ = [
    # Repositories
    "BookingRepo",
    "CarReader",
    "CouponRepo",
    "IdempotencyRecord",
    "IdempotencyRepo",
    "PaymentRepo",
    "PicVerificationRepo",
    "TopupRepo",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "OtpCodeGenerator",
    "RandomOtpCodeGenerator",
    "FakeOtpCodeGenerator",
]
