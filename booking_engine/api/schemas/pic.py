from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from booking_engine.domain.entities.pic_verification import (
    ConditionGrade,
    PicVerification,
    VerificationStatus,
    VerificationType,
)


class CreateVerificationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    car_id: int
    parking_id: int
    pic_id: int
    booking_id: int
    verification_type: VerificationType
    engine_condition: ConditionGrade | None = None
    body_condition: ConditionGrade | None = None
    interior_condition: ConditionGrade | None = None
    tire_condition: ConditionGrade | None = None
    rc_verified: bool = False
    insurance_verified: bool = False
    pollution_verified: bool = False
    verification_images: list[str] = Field(default_factory=list)
    pic_comments: str | None = None
    vendor_feedback: str | None = None


class UpdateVerificationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pic_id: int
    engine_condition: ConditionGrade | None = None
    body_condition: ConditionGrade | None = None
    interior_condition: ConditionGrade | None = None
    tire_condition: ConditionGrade | None = None
    rc_verified: bool | None = None
    insurance_verified: bool | None = None
    pollution_verified: bool | None = None
    verification_images: list[str] | None = None
    pic_comments: str | None = None
    vendor_feedback: str | None = None


class FinalizeVerificationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pic_id: int
    status: VerificationStatus
    pic_comments: str | None = None


class VerificationResponse(BaseModel):
    id: int
    car_id: int
    parking_id: int
    pic_id: int
    booking_id: int
    verification_type: str
    status: str
    engine_condition: str | None = None
    body_condition: str | None = None
    interior_condition: str | None = None
    tire_condition: str | None = None
    rc_verified: bool
    insurance_verified: bool
    pollution_verified: bool
    verification_images: list[str]
    pic_comments: str | None = None
    vendor_feedback: str | None = None
    verified_at: datetime | None = None

    @classmethod
    def from_entity(cls, verification: PicVerification) -> "VerificationResponse":
        def grade(value: ConditionGrade | None) -> str | None:
            return value.value if value else None

        return cls(
            id=verification.id,
            car_id=verification.car_id,
            parking_id=verification.parking_id,
            pic_id=verification.pic_id,
            booking_id=verification.booking_id,
            verification_type=verification.verification_type.value,
            status=verification.status.value,
            engine_condition=grade(verification.engine_condition),
            body_condition=grade(verification.body_condition),
            interior_condition=grade(verification.interior_condition),
            tire_condition=grade(verification.tire_condition),
            rc_verified=verification.rc_verified,
            insurance_verified=verification.insurance_verified,
            pollution_verified=verification.pollution_verified,
            verification_images=list(verification.verification_images),
            pic_comments=verification.pic_comments,
            vendor_feedback=verification.vendor_feedback,
            verified_at=verification.verified_at,
        )
