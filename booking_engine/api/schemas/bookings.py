from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from booking_engine.api.schemas.common import Money, UtcDatetime
from booking_engine.domain.entities.booking import Booking, DeliveryType
from booking_engine.domain.entities.topup import BookingTopup


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: int
    car_id: int
    start_date: UtcDatetime
    end_date: UtcDatetime
    pickup_date: UtcDatetime | None = None
    pickup_parking_id: int | None = None
    dropoff_parking_id: int | None = None
    delivery_type: DeliveryType = DeliveryType.PICKUP
    delivery_address: str | None = None
    delivery_charges: Money = Field(default=Decimal("0"))
    insurance_amount: Money | None = None
    coupon_code: str | None = None

    @model_validator(mode="after")
    def _check_dates_and_delivery(self) -> "CreateBookingRequest":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        if self.delivery_type == DeliveryType.DELIVERY and not self.delivery_address:
            raise ValueError("delivery_address is required for delivery bookings")
        return self


class ToolItem(BaseModel):
    name: str
    image: str | None = None


class RescheduleBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: int
    new_pickup_date: UtcDatetime
    new_start_date: UtcDatetime | None = None
    new_end_date: UtcDatetime | None = None

    @model_validator(mode="after")
    def _check_window(self) -> "RescheduleBookingRequest":
        if self.new_start_date and self.new_end_date and self.new_end_date <= self.new_start_date:
            raise ValueError("new_end_date must be after new_start_date")
        if self.new_start_date and self.new_pickup_date < self.new_start_date:
            raise ValueError("new_pickup_date must not be before new_start_date")
        if self.new_end_date and self.new_pickup_date >= self.new_end_date:
            raise ValueError("new_pickup_date must be before new_end_date")
        return self


class CancelBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: int
    as_admin: bool = False


class SubmitConfirmationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: int
    car_condition_images: list[str] = Field(default_factory=list)
    tool_images: list[str] = Field(default_factory=list)
    tools: list[ToolItem] = Field(default_factory=list)


class GenerateOtpRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: int


class VerifyOtpRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    otp_code: str
    verified_by: int | None = None


class ConfirmReturnRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pic_id: int | None = None
    return_condition: str | None = None
    return_images: list[str] = Field(default_factory=list)
    return_comments: str | None = None


class ApplyTopupRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: int
    topup_id: int


class BookingResponse(BaseModel):
    id: int
    user_id: int
    car_id: int
    status: str
    start_date: datetime
    end_date: datetime
    pickup_date: datetime | None = None
    original_pickup_date: datetime | None = None
    actual_pickup_date: datetime | None = None
    actual_dropoff_date: datetime | None = None
    reschedule_count: int
    max_reschedule_count: int
    pickup_parking_id: int | None = None
    dropoff_parking_id: int | None = None
    delivery_type: str
    delivery_address: str | None = None
    base_price: Decimal
    insurance_amount: Decimal
    delivery_charges: Decimal
    discount_amount: Decimal
    coupon_id: int | None = None
    total_price: Decimal
    advance_amount: Decimal
    remaining_amount: Decimal
    extension_price: Decimal
    extension_till: datetime | None = None
    extension_hours: int
    confirmation_status: str
    advance_payment_status: str
    final_payment_status: str
    user_confirmed: bool
    pic_approved: bool
    otp_expires_at: datetime | None = None
    otp_verified: bool
    return_condition: str | None = None
    lock_version: int

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            car_id=booking.car_id,
            status=booking.status.value,
            start_date=booking.start_date,
            end_date=booking.end_date,
            pickup_date=booking.pickup_date,
            original_pickup_date=booking.original_pickup_date,
            actual_pickup_date=booking.actual_pickup_date,
            actual_dropoff_date=booking.actual_dropoff_date,
            reschedule_count=booking.reschedule_count,
            max_reschedule_count=booking.max_reschedule_count,
            pickup_parking_id=booking.pickup_parking_id,
            dropoff_parking_id=booking.dropoff_parking_id,
            delivery_type=booking.delivery_type.value,
            delivery_address=booking.delivery_address,
            base_price=booking.base_price,
            insurance_amount=booking.insurance_amount,
            delivery_charges=booking.delivery_charges,
            discount_amount=booking.discount_amount,
            coupon_id=booking.coupon_id,
            total_price=booking.total_price,
            advance_amount=booking.advance_amount,
            remaining_amount=booking.remaining_amount,
            extension_price=booking.extension_price,
            extension_till=booking.extension_till,
            extension_hours=booking.extension_hours,
            confirmation_status=booking.confirmation_status.value,
            advance_payment_status=booking.advance_payment_status.value,
            final_payment_status=booking.final_payment_status.value,
            user_confirmed=booking.user_confirmed,
            pic_approved=booking.pic_approved,
            otp_expires_at=booking.otp_expires_at,
            otp_verified=booking.otp_verified,
            return_condition=booking.return_condition,
            lock_version=booking.lock_version,
        )


class OtpResponse(BaseModel):
    booking_id: int
    otp_code: str
    otp_expires_at: datetime


class BookingTopupResponse(BaseModel):
    id: int
    booking_id: int
    topup_id: int
    original_end_date: datetime
    new_end_date: datetime
    amount: Decimal
    payment_status: str
    payment_reference: str | None = None

    @classmethod
    def from_entity(cls, row: BookingTopup) -> "BookingTopupResponse":
        return cls(
            id=row.id,
            booking_id=row.booking_id,
            topup_id=row.topup_id,
            original_end_date=row.original_end_date,
            new_end_date=row.new_end_date,
            amount=row.amount,
            payment_status=row.payment_status.value,
            payment_reference=row.payment_reference,
        )


class BookingProgress(BaseModel):
    advance_paid: bool
    user_confirmed: bool
    pic_approved: bool
    otp_verified: bool
    final_paid: bool
    picked_up: bool
    returned: bool


class BookingStatusResponse(BaseModel):
    booking_id: int
    status: str
    confirmation_status: str
    timeline: str
    is_overdue: bool
    overdue_hours: int
    effective_end_date: datetime
    progress: BookingProgress
    next_steps: list[str]


class OverdueBookingResponse(BaseModel):
    booking_id: int
    user_id: int
    car_id: int
    effective_end_date: datetime
    overdue_hours: int
    return_inspection_status: str | None = None
    final_payment_status: str

    @classmethod
    def from_view(cls, view: Any) -> "OverdueBookingResponse":
        return cls(
            booking_id=view.booking.id,
            user_id=view.booking.user_id,
            car_id=view.booking.car_id,
            effective_end_date=view.booking.effective_end_date,
            overdue_hours=view.overdue_hours,
            return_inspection_status=view.return_inspection_status,
            final_payment_status=view.booking.final_payment_status.value,
        )
