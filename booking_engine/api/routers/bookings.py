from decimal import Decimal

from fastapi import APIRouter, Depends, Header, status
from pydantic import BaseModel

from booking_engine.api.dependencies import get_use_cases
from booking_engine.api.schemas.bookings import (
    ApplyTopupRequest,
    BookingProgress,
    BookingResponse,
    BookingStatusResponse,
    BookingTopupResponse,
    CancelBookingRequest,
    ConfirmReturnRequest,
    CreateBookingRequest,
    GenerateOtpRequest,
    OtpResponse,
    OverdueBookingResponse,
    RescheduleBookingRequest,
    SubmitConfirmationRequest,
    VerifyOtpRequest,
)

router = APIRouter()


class PaymentRecordResponse(BaseModel):
    id: int
    milestone: str
    status: str
    amount: Decimal
    reference_id: str | None = None
    booking_topup_id: int | None = None


@router.post(
    "/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    payload: CreateBookingRequest,
    idem_key: str | None = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    use_cases=Depends(get_use_cases),
) -> BookingResponse:
    return await use_cases["create_booking"].execute(request=payload, idem_key=idem_key)


# Declared before /bookings/{booking_id} so "overdue" is not parsed as an id.
@router.get("/bookings/overdue", response_model=list[OverdueBookingResponse])
async def list_overdue_bookings(use_cases=Depends(get_use_cases)) -> list[OverdueBookingResponse]:
    views = await use_cases["list_overdue"].execute()
    return [OverdueBookingResponse.from_view(view) for view in views]


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: int, use_cases=Depends(get_use_cases)) -> BookingResponse:
    booking = await use_cases["get_booking"].execute(booking_id)
    return BookingResponse.from_entity(booking)


@router.get("/bookings/{booking_id}/status", response_model=BookingStatusResponse)
async def get_booking_status(
    booking_id: int, use_cases=Depends(get_use_cases)
) -> BookingStatusResponse:
    view = await use_cases["get_booking_status"].execute(booking_id)
    return BookingStatusResponse(
        booking_id=view.booking.id,
        status=view.booking.status.value,
        confirmation_status=view.booking.confirmation_status.value,
        timeline=view.timeline,
        is_overdue=view.is_overdue,
        overdue_hours=view.overdue_hours,
        effective_end_date=view.booking.effective_end_date,
        progress=BookingProgress(**view.progress),
        next_steps=view.next_steps,
    )


@router.get("/bookings/{booking_id}/payments", response_model=list[PaymentRecordResponse])
async def list_booking_payments(
    booking_id: int, use_cases=Depends(get_use_cases)
) -> list[PaymentRecordResponse]:
    payments = await use_cases["get_booking"].list_payments(booking_id)
    return [
        PaymentRecordResponse(
            id=p.id,
            milestone=p.milestone.value,
            status=p.status.value,
            amount=p.amount,
            reference_id=p.reference_id,
            booking_topup_id=p.booking_topup_id,
        )
        for p in payments
    ]


@router.post("/bookings/{booking_id}/reschedule", response_model=BookingResponse)
async def reschedule_booking(
    booking_id: int,
    payload: RescheduleBookingRequest,
    use_cases=Depends(get_use_cases),
) -> BookingResponse:
    booking = await use_cases["reschedule_booking"].execute(booking_id, payload)
    return BookingResponse.from_entity(booking)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    payload: CancelBookingRequest,
    use_cases=Depends(get_use_cases),
) -> BookingResponse:
    booking = await use_cases["cancel_booking"].execute(booking_id, payload)
    return BookingResponse.from_entity(booking)


@router.post("/bookings/{booking_id}/confirmation", response_model=BookingResponse)
async def submit_confirmation(
    booking_id: int,
    payload: SubmitConfirmationRequest,
    use_cases=Depends(get_use_cases),
) -> BookingResponse:
    booking = await use_cases["submit_confirmation"].execute(booking_id, payload)
    return BookingResponse.from_entity(booking)


@router.post("/bookings/{booking_id}/otp", response_model=OtpResponse)
async def generate_otp(
    booking_id: int,
    payload: GenerateOtpRequest,
    use_cases=Depends(get_use_cases),
) -> OtpResponse:
    booking = await use_cases["generate_otp"].execute(booking_id, payload)
    return OtpResponse(
        booking_id=booking.id,
        otp_code=booking.otp_code,
        otp_expires_at=booking.otp_expires_at,
    )


@router.post("/bookings/{booking_id}/otp/verify", response_model=BookingResponse)
async def verify_otp(
    booking_id: int,
    payload: VerifyOtpRequest,
    use_cases=Depends(get_use_cases),
) -> BookingResponse:
    booking = await use_cases["verify_otp"].execute(booking_id, payload)
    return BookingResponse.from_entity(booking)


@router.post("/bookings/{booking_id}/return", response_model=BookingResponse)
async def confirm_return(
    booking_id: int,
    payload: ConfirmReturnRequest,
    use_cases=Depends(get_use_cases),
) -> BookingResponse:
    booking = await use_cases["confirm_return"].execute(booking_id, payload)
    return BookingResponse.from_entity(booking)


@router.post(
    "/bookings/{booking_id}/topups",
    response_model=BookingTopupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def apply_topup(
    booking_id: int,
    payload: ApplyTopupRequest,
    use_cases=Depends(get_use_cases),
) -> BookingTopupResponse:
    row = await use_cases["apply_topup"].execute(booking_id, payload)
    return BookingTopupResponse.from_entity(row)
