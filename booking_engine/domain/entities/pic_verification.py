"""PIC (person in charge) vehicle inspection records."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from booking_engine.domain.errors import BookingAccessDeniedError, IllegalTransitionError


class VerificationType(str, Enum):
    PICKUP = "pickup"
    RETURN = "return"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    RECHECK = "recheck"


class ConditionGrade(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


EDITABLE_VERIFICATION_STATUSES = frozenset({VerificationStatus.PENDING, VerificationStatus.RECHECK})
FINAL_OUTCOMES = frozenset(
    {VerificationStatus.APPROVED, VerificationStatus.REJECTED, VerificationStatus.RECHECK}
)

UPDATABLE_FIELDS = (
    "engine_condition",
    "body_condition",
    "interior_condition",
    "tire_condition",
    "rc_verified",
    "insurance_verified",
    "pollution_verified",
    "verification_images",
    "pic_comments",
    "vendor_feedback",
)


@dataclass
class PicVerification:
    """
    One inspection event on a car at a parking site, tied to a booking.

    Only the inspector who opened the record can edit it, and only while it is
    ``pending`` or ``recheck``.
    """

    id: int | None = None
    car_id: int = 0
    parking_id: int = 0
    pic_id: int = 0
    booking_id: int = 0
    verification_type: VerificationType = VerificationType.PICKUP
    status: VerificationStatus = VerificationStatus.PENDING
    engine_condition: ConditionGrade | None = None
    body_condition: ConditionGrade | None = None
    interior_condition: ConditionGrade | None = None
    tire_condition: ConditionGrade | None = None
    rc_verified: bool = False
    insurance_verified: bool = False
    pollution_verified: bool = False
    verification_images: list[str] = field(default_factory=list)
    pic_comments: str | None = None
    vendor_feedback: str | None = None
    verified_at: datetime | None = None
    lock_version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_VERIFICATION_STATUSES

    def _ensure_editable_by(self, pic_id: int, operation: str) -> None:
        if pic_id != self.pic_id:
            raise BookingAccessDeniedError(self.booking_id, operation)
        if not self.is_editable:
            raise IllegalTransitionError(
                self.booking_id,
                self.status.value,
                operation,
                f"{self.verification_type.value} inspection {self.id} is already {self.status.value}",
            )

    def update(self, pic_id: int, changes: dict, now: datetime) -> None:
        self._ensure_editable_by(pic_id, "update inspection")
        for name, value in changes.items():
            if name in UPDATABLE_FIELDS:
                setattr(self, name, value)
        self.updated_at = now

    def finalize(
        self,
        pic_id: int,
        outcome: VerificationStatus,
        comments: str | None,
        now: datetime,
    ) -> None:
        self._ensure_editable_by(pic_id, "finalize inspection")
        if outcome not in FINAL_OUTCOMES:
            raise IllegalTransitionError(
                self.booking_id, self.status.value, "finalize inspection", f"'{outcome.value}' is not an outcome"
            )
        self.status = outcome
        if comments is not None:
            self.pic_comments = comments
        self.verified_at = now
        self.updated_at = now
