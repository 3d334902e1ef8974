"""Entities of the booking domain."""

from booking_engine.domain.entities.booking import (
    DEFAULT_MAX_RESCHEDULE_COUNT,
    Booking,
    ConfirmationStatus,
    DeliveryType,
    MilestoneStatus,
)
from booking_engine.domain.entities.car import Car, CarStatus
from booking_engine.domain.entities.coupon import Coupon, CouponStatus, DiscountType
from booking_engine.domain.entities.payment import (
    Payment,
    PaymentEvent,
    PaymentEventStatus,
    PaymentMilestone,
)
from booking_engine.domain.entities.pic_verification import (
    ConditionGrade,
    PicVerification,
    VerificationStatus,
    VerificationType,
)
from booking_engine.domain.entities.topup import BookingTopup, Topup, TopupPaymentStatus

__all__ = [
    # Booking
    "Booking",
    "ConfirmationStatus",
    "DeliveryType",
    "MilestoneStatus",
    "DEFAULT_MAX_RESCHEDULE_COUNT",
    # Car
    "Car",
    "CarStatus",
    # Coupon
    "Coupon",
    "CouponStatus",
    "DiscountType",
    # Payment
    "Payment",
    "PaymentEvent",
    "PaymentEventStatus",
    "PaymentMilestone",
    # PIC
    "PicVerification",
    "VerificationType",
    "VerificationStatus",
    "ConditionGrade",
    # Topup
    "Topup",
    "BookingTopup",
    "TopupPaymentStatus",
]
