from decimal import Decimal

from pydantic import BaseModel, ConfigDict, model_validator

from booking_engine.api.schemas.common import Money
from booking_engine.domain.entities.payment import PaymentEventStatus, PaymentMilestone


class PaymentEventRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    booking_id: int
    milestone: PaymentMilestone
    status: PaymentEventStatus
    reference_id: str | None = None
    amount: Money | None = None
    booking_topup_id: int | None = None

    @model_validator(mode="after")
    def _topup_needs_row(self) -> "PaymentEventRequest":
        if self.milestone == PaymentMilestone.TOPUP and self.booking_topup_id is None:
            raise ValueError("booking_topup_id is required for topup payments")
        return self


class PaymentEventResponse(BaseModel):
    booking_id: int
    milestone: str
    status: str
    applied: bool
    booking_status: str
    payment_id: int | None = None
    amount: Decimal | None = None
