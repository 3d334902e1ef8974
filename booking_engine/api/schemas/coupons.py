from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from booking_engine.api.schemas.common import Money


class ValidateCouponRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str
    booking_amount: Money
    user_id: int | None = None


class CouponValidationResponse(BaseModel):
    coupon_id: int
    code: str
    discount_type: str
    discount_amount: Decimal
    final_amount: Decimal
