from fastapi import APIRouter, Depends

from booking_engine.api.dependencies import get_use_cases
from booking_engine.api.schemas.availability import AvailabilityRequest, AvailabilityResponse

router = APIRouter()


@router.post("/availability", response_model=AvailabilityResponse)
async def check_availability(
    payload: AvailabilityRequest,
    use_cases=Depends(get_use_cases),
) -> AvailabilityResponse:
    result = await use_cases["check_availability"].execute(payload)
    return AvailabilityResponse(
        car_id=result.car_id,
        available=result.available,
        reason=result.reason,
        conflicting_booking_ids=result.conflicting_booking_ids,
    )
