"""
Domain layer of the booking engine.

Pure business rules with no framework dependencies.

Layout:
- entities/: Booking, Car, Coupon, Topup, PicVerification, Payment
- services/: pricing, availability, OTP policy and the booking state machine
- value_objects/: DatetimeRange and money helpers
- errors.py: domain exceptions
"""

from booking_engine.domain.entities import (
    Booking,
    BookingTopup,
    Car,
    CarStatus,
    Coupon,
    PicVerification,
    Topup,
)
from booking_engine.domain.errors import (
    AvailabilityConflictError,
    BookingAccessDeniedError,
    BookingNotFoundError,
    CarNotFoundError,
    CouponInvalidError,
    DomainError,
    IdempotencyConflictError,
    IllegalTransitionError,
    OtpError,
    RescheduleLimitExceededError,
    StaleWriteError,
    TopupNotFoundError,
    ValidationError,
    VerificationNotFoundError,
)
from booking_engine.domain.services.state_machine import BookingEvent, BookingStatus
from booking_engine.domain.value_objects import DatetimeRange

__all__ = [
    # Entities
    "Booking",
    "BookingTopup",
    "Car",
    "CarStatus",
    "Coupon",
    "PicVerification",
    "Topup",
    # State machine
    "BookingEvent",
    "BookingStatus",
    # Value Objects
    "DatetimeRange",
    # Errors
    "DomainError",
    "ValidationError",
    "IdempotencyConflictError",
    "BookingNotFoundError",
    "CarNotFoundError",
    "TopupNotFoundError",
    "VerificationNotFoundError",
    "BookingAccessDeniedError",
    "AvailabilityConflictError",
    "CouponInvalidError",
    "RescheduleLimitExceededError",
    "OtpError",
    "IllegalTransitionError",
    "StaleWriteError",
]
