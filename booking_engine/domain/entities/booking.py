"""Booking entity - aggregate root of the engine."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

from booking_engine.domain.errors import IllegalTransitionError
from booking_engine.domain.services.state_machine import (
    BookingEvent,
    BookingStatus,
    ensure_mutable,
    next_status,
)
from booking_engine.domain.value_objects.datetime_range import DatetimeRange

DEFAULT_MAX_RESCHEDULE_COUNT = 3


class ConfirmationStatus(str, Enum):
    PENDING = "pending"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class MilestoneStatus(str, Enum):
    """Status of the advance or final payment milestone."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class DeliveryType(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


@dataclass
class Booking:
    """
    A customer's reservation of one car over a date range.

    Pricing fields are fixed at creation; extensions are tracked separately in
    ``extension_price``/``extension_till``. ``status`` is the single authority
    for the lifecycle, the remaining flags are bookkeeping around it.
    """

    # Identity
    id: int | None = None
    user_id: int = 0
    car_id: int = 0
    pickup_parking_id: int | None = None
    dropoff_parking_id: int | None = None
    coupon_id: int | None = None

    # Schedule
    start_date: datetime | None = None
    end_date: datetime | None = None
    pickup_date: datetime | None = None
    actual_pickup_date: datetime | None = None
    actual_dropoff_date: datetime | None = None
    original_pickup_date: datetime | None = None
    reschedule_count: int = 0
    max_reschedule_count: int = DEFAULT_MAX_RESCHEDULE_COUNT

    # Pricing
    base_price: Decimal = Decimal("0")
    insurance_amount: Decimal = Decimal("0")
    delivery_charges: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    total_price: Decimal = Decimal("0")
    advance_amount: Decimal = Decimal("0")
    remaining_amount: Decimal = Decimal("0")

    # Extension
    extension_price: Decimal = Decimal("0")
    extension_till: datetime | None = None
    extension_hours: int = 0

    # Lifecycle
    status: BookingStatus = BookingStatus.PENDING
    confirmation_status: ConfirmationStatus = ConfirmationStatus.PENDING
    advance_payment_status: MilestoneStatus = MilestoneStatus.PENDING
    advance_payment_reference: str | None = None
    final_payment_status: MilestoneStatus = MilestoneStatus.PENDING
    final_payment_reference: str | None = None

    # PIC approval
    pic_approved: bool = False
    pic_approved_at: datetime | None = None
    pic_approved_by: int | None = None
    pic_comments: str | None = None

    # User confirmation
    user_confirmed: bool = False
    user_confirmed_at: datetime | None = None

    # OTP
    otp_code: str | None = None
    otp_expires_at: datetime | None = None
    otp_verified: bool = False
    otp_verified_at: datetime | None = None
    otp_verified_by: int | None = None

    # Delivery
    delivery_type: DeliveryType = DeliveryType.PICKUP
    delivery_address: str | None = None

    # Media
    car_condition_images: list[str] = field(default_factory=list)
    tool_images: list[str] = field(default_factory=list)
    tools: list[dict[str, Any]] = field(default_factory=list)

    # Return
    return_condition: str | None = None
    return_images: list[str] = field(default_factory=list)
    return_comments: str | None = None

    # Concurrency control
    lock_version: int = 0

    created_at: datetime | None = None
    updated_at: datetime | None = None

    # === Derived ===

    @property
    def date_range(self) -> DatetimeRange:
        return DatetimeRange(start=self.start_date, end=self.end_date)

    @property
    def effective_end_date(self) -> datetime:
        """End of the rental including paid extensions."""
        if self.extension_till and self.extension_till > self.end_date:
            return self.extension_till
        return self.end_date

    @property
    def effective_pickup_date(self) -> datetime:
        return self.pickup_date or self.start_date

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def has_been_handed_over(self) -> bool:
        return self.actual_pickup_date is not None

    def is_overdue(self, now: datetime) -> bool:
        return self.status == BookingStatus.ACTIVE and now > self.effective_end_date

    # === Transitions ===

    def _apply(self, event: BookingEvent, now: datetime) -> BookingStatus:
        previous = self.status
        self.status = next_status(self.id, self.status, event)
        self.updated_at = now
        return previous

    def mark_advance_paid(self, reference: str | None, now: datetime) -> None:
        self._apply(BookingEvent.ADVANCE_PAYMENT_COMPLETED, now)
        self.advance_payment_status = MilestoneStatus.COMPLETED
        self.advance_payment_reference = reference

    def approve_pickup(self, pic_id: int, comments: str | None, now: datetime) -> None:
        self._apply(BookingEvent.PIC_APPROVED, now)
        self.pic_approved = True
        self.pic_approved_at = now
        self.pic_approved_by = pic_id
        self.pic_comments = comments
        self.confirmation_status = ConfirmationStatus.APPROVED

    def deny_pickup(self, pic_id: int, comments: str | None, now: datetime) -> None:
        self._apply(BookingEvent.PIC_REJECTED, now)
        self.pic_approved = False
        self.pic_approved_at = now
        self.pic_approved_by = pic_id
        self.pic_comments = comments
        self.confirmation_status = ConfirmationStatus.REJECTED

    def request_recheck(self, pic_id: int, comments: str | None, now: datetime) -> None:
        """PIC sends the pickup inspection back; the customer has to resubmit."""
        if self.status != BookingStatus.ADVANCE_PAID:
            raise IllegalTransitionError(
                self.id, self.status.value, "pickup recheck", "only advance-paid bookings await inspection"
            )
        self.pic_approved = False
        self.pic_approved_by = pic_id
        self.pic_comments = comments
        self.confirmation_status = ConfirmationStatus.REJECTED
        self.updated_at = now

    def start_rental(self, verified_by: int | None, now: datetime) -> None:
        """OTP verified at the parking site: the car leaves with the customer."""
        self._apply(BookingEvent.OTP_VERIFIED, now)
        self.otp_verified = True
        self.otp_verified_at = now
        self.otp_verified_by = verified_by
        self.actual_pickup_date = now

    def complete(
        self,
        now: datetime,
        return_condition: str | None = None,
        return_images: list[str] | None = None,
        return_comments: str | None = None,
    ) -> None:
        self._apply(BookingEvent.RETURN_CONFIRMED, now)
        self.actual_dropoff_date = now
        self.return_condition = return_condition or "good"
        self.return_images = list(return_images or [])
        self.return_comments = return_comments

    def cancel(self, by_user: bool, now: datetime) -> None:
        if by_user and self.has_been_handed_over:
            raise IllegalTransitionError(
                self.id,
                self.status.value,
                BookingEvent.CANCEL.value,
                "the car has already been handed over",
            )
        self._apply(BookingEvent.CANCEL, now)

    # === Side transitions (status unchanged) ===

    def record_advance_failure(self, now: datetime) -> None:
        ensure_mutable(self.id, self.status, "advance payment failure")
        if self.status != BookingStatus.PENDING:
            raise IllegalTransitionError(
                self.id, self.status.value, "advance payment failure", "advance already settled"
            )
        self.advance_payment_status = MilestoneStatus.FAILED
        self.updated_at = now

    def record_final_payment(self, reference: str | None, now: datetime) -> None:
        if self.status not in (
            BookingStatus.ADVANCE_PAID,
            BookingStatus.CONFIRMED,
            BookingStatus.ACTIVE,
        ):
            raise IllegalTransitionError(
                self.id, self.status.value, "final payment", "advance payment must be completed first"
            )
        self.final_payment_status = MilestoneStatus.COMPLETED
        self.final_payment_reference = reference
        self.updated_at = now

    def record_final_failure(self, now: datetime) -> None:
        ensure_mutable(self.id, self.status, "final payment failure")
        if self.final_payment_status == MilestoneStatus.COMPLETED:
            raise IllegalTransitionError(
                self.id, self.status.value, "final payment failure", "final payment already completed"
            )
        self.final_payment_status = MilestoneStatus.FAILED
        self.updated_at = now

    def issue_otp(self, code: str, expires_at: datetime, now: datetime) -> None:
        ensure_mutable(self.id, self.status, "issue OTP")
        self.otp_code = code
        self.otp_expires_at = expires_at
        self.otp_verified = False
        self.otp_verified_at = None
        self.otp_verified_by = None
        self.updated_at = now

    def submit_confirmation(
        self,
        car_condition_images: list[str],
        tool_images: list[str],
        tools: list[dict[str, Any]],
        now: datetime,
    ) -> None:
        if self.status not in (BookingStatus.ADVANCE_PAID, BookingStatus.CONFIRMED):
            raise IllegalTransitionError(
                self.id,
                self.status.value,
                "submit confirmation",
                "advance payment must be completed before submitting a confirmation request",
            )
        if self.confirmation_status == ConfirmationStatus.REJECTED:
            self.pic_approved = False
            self.pic_approved_at = None
            self.pic_approved_by = None
        self.car_condition_images = list(car_condition_images)
        self.tool_images = list(tool_images)
        self.tools = [dict(tool) for tool in tools]
        self.user_confirmed = True
        self.user_confirmed_at = now
        if self.confirmation_status != ConfirmationStatus.APPROVED:
            self.confirmation_status = ConfirmationStatus.PENDING_APPROVAL
        self.updated_at = now

    def reschedule(
        self,
        new_pickup_date: datetime,
        new_start_date: datetime,
        new_end_date: datetime,
        now: datetime,
    ) -> None:
        if self.original_pickup_date is None:
            self.original_pickup_date = self.effective_pickup_date
        self.pickup_date = new_pickup_date
        self.start_date = new_start_date
        self.end_date = new_end_date
        self.reschedule_count += 1
        self.updated_at = now

    def apply_extension(
        self, new_end_date: datetime, amount: Decimal, hours: int, now: datetime
    ) -> None:
        if self.status != BookingStatus.ACTIVE:
            raise IllegalTransitionError(
                self.id, self.status.value, "extend", "topups can only be applied to active bookings"
            )
        if self.extension_till is None or new_end_date > self.extension_till:
            self.extension_till = new_end_date
        self.extension_price += amount
        self.extension_hours += hours
        self.updated_at = now

    def overdue_hours(self, now: datetime) -> int:
        if not self.is_overdue(now):
            return 0
        late = now - self.effective_end_date
        return math.ceil(late / timedelta(hours=1))
