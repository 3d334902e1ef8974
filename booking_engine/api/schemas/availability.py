from pydantic import BaseModel, ConfigDict, model_validator

from booking_engine.api.schemas.common import UtcDatetime


class AvailabilityRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    car_id: int
    start_date: UtcDatetime
    end_date: UtcDatetime
    exclude_booking_id: int | None = None

    @model_validator(mode="after")
    def _check_dates(self) -> "AvailabilityRequest":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class AvailabilityResponse(BaseModel):
    car_id: int
    available: bool
    reason: str | None = None
    conflicting_booking_ids: list[int] = []
