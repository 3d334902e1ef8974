from fastapi import APIRouter, Depends

from booking_engine.api.dependencies import get_use_cases
from booking_engine.api.schemas.coupons import CouponValidationResponse, ValidateCouponRequest

router = APIRouter()


@router.post("/coupons/validate", response_model=CouponValidationResponse)
async def validate_coupon(
    payload: ValidateCouponRequest,
    use_cases=Depends(get_use_cases),
) -> CouponValidationResponse:
    validation = await use_cases["validate_coupon"].execute(payload)
    return CouponValidationResponse(
        coupon_id=validation.coupon.id,
        code=validation.coupon.code,
        discount_type=validation.coupon.discount_type.value,
        discount_amount=validation.discount_amount,
        final_amount=validation.final_amount,
    )
