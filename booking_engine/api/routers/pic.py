from fastapi import APIRouter, Depends, status

from booking_engine.api.dependencies import get_use_cases
from booking_engine.api.schemas.pic import (
    CreateVerificationRequest,
    FinalizeVerificationRequest,
    UpdateVerificationRequest,
    VerificationResponse,
)

router = APIRouter()


@router.post(
    "/pic/verifications",
    response_model=VerificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_verification(
    payload: CreateVerificationRequest,
    use_cases=Depends(get_use_cases),
) -> VerificationResponse:
    verification = await use_cases["submit_verification"].execute(payload)
    return VerificationResponse.from_entity(verification)


@router.patch("/pic/verifications/{verification_id}", response_model=VerificationResponse)
async def update_verification(
    verification_id: int,
    payload: UpdateVerificationRequest,
    use_cases=Depends(get_use_cases),
) -> VerificationResponse:
    verification = await use_cases["update_verification"].execute(verification_id, payload)
    return VerificationResponse.from_entity(verification)


@router.post(
    "/pic/verifications/{verification_id}/finalize",
    response_model=VerificationResponse,
)
async def finalize_verification(
    verification_id: int,
    payload: FinalizeVerificationRequest,
    use_cases=Depends(get_use_cases),
) -> VerificationResponse:
    verification = await use_cases["finalize_verification"].execute(verification_id, payload)
    return VerificationResponse.from_entity(verification)
