"""Dict-backed adapters: the default runtime and the test double for every port."""

from booking_engine.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from booking_engine.infrastructure.in_memory.car_reader import InMemoryCarReader
from booking_engine.infrastructure.in_memory.coupon_repo import InMemoryCouponRepo
from booking_engine.infrastructure.in_memory.idempotency_repo import InMemoryIdempotencyRepo
from booking_engine.infrastructure.in_memory.payment_repo import InMemoryPaymentRepo
from booking_engine.infrastructure.in_memory.pic_verification_repo import (
    InMemoryPicVerificationRepo,
)
from booking_engine.infrastructure.in_memory.store import InMemoryStore
from booking_engine.infrastructure.in_memory.topup_repo import InMemoryTopupRepo
from booking_engine.infrastructure.in_memory.transaction_manager import InMemoryTransactionManager

__all__ = [
    "InMemoryBookingRepo",
    "InMemoryCarReader",
    "InMemoryCouponRepo",
    "InMemoryIdempotencyRepo",
    "InMemoryPaymentRepo",
    "InMemoryPicVerificationRepo",
    "InMemoryStore",
    "InMemoryTopupRepo",
    "InMemoryTransactionManager",
]
