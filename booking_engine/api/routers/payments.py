from fastapi import APIRouter, Depends

from booking_engine.api.dependencies import get_use_cases
from booking_engine.api.schemas.payments import PaymentEventRequest, PaymentEventResponse
from booking_engine.domain.entities.payment import PaymentEvent

router = APIRouter()


@router.post("/payments/events", response_model=PaymentEventResponse)
async def handle_payment_event(
    payload: PaymentEventRequest,
    use_cases=Depends(get_use_cases),
) -> PaymentEventResponse:
    """Callback from the payment subsystem for an advance, final or topup payment."""
    event = PaymentEvent(**payload.model_dump())
    outcome = await use_cases["handle_payment_event"].execute(event)
    return PaymentEventResponse(
        booking_id=outcome.booking.id,
        milestone=event.milestone.value,
        status=event.status.value,
        applied=outcome.applied,
        booking_status=outcome.booking.status.value,
        payment_id=outcome.payment.id if outcome.payment else None,
        amount=outcome.payment.amount if outcome.payment else None,
    )
