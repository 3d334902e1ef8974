"""Topup catalogue entries and the per-booking extension ledger."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum


class TopupPaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


@dataclass
class Topup:
    id: int | None = None
    name: str = ""
    duration_hours: int = 0
    price: Decimal = Decimal("0")
    category: str = "extension"
    is_active: bool = True

    @property
    def duration(self) -> timedelta:
        return timedelta(hours=self.duration_hours)


@dataclass
class BookingTopup:
    """
    One extension purchase. After creation only the payment fields move.
    """

    id: int | None = None
    booking_id: int = 0
    topup_id: int = 0
    applied_at: datetime | None = None
    original_end_date: datetime | None = None
    new_end_date: datetime | None = None
    amount: Decimal = Decimal("0")
    payment_status: TopupPaymentStatus = TopupPaymentStatus.PENDING
    payment_reference: str | None = None
    created_at: datetime | None = None

    @property
    def hours(self) -> int:
        return int((self.new_end_date - self.original_end_date).total_seconds() // 3600)

    def mark_paid(self, reference: str | None) -> None:
        self.payment_status = TopupPaymentStatus.PAID
        self.payment_reference = reference

    def mark_failed(self, reference: str | None) -> None:
        self.payment_status = TopupPaymentStatus.FAILED
        self.payment_reference = reference
