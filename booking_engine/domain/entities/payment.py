"""Payment ledger rows and the inbound payment event."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class PaymentMilestone(str, Enum):
    ADVANCE = "advance"
    FINAL = "final"
    TOPUP = "topup"


class PaymentEventStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class PaymentEvent:
    """Callback from the payment subsystem. The engine never talks to a gateway."""

    booking_id: int
    milestone: PaymentMilestone
    status: PaymentEventStatus
    reference_id: str | None = None
    amount: Decimal | None = None
    booking_topup_id: int | None = None


@dataclass
class Payment:
    id: int | None = None
    booking_id: int = 0
    milestone: PaymentMilestone = PaymentMilestone.ADVANCE
    status: PaymentEventStatus = PaymentEventStatus.COMPLETED
    amount: Decimal = Decimal("0")
    reference_id: str | None = None
    booking_topup_id: int | None = None
    created_at: datetime | None = None
