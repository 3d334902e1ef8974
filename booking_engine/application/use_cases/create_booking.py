import hashlib
import json
import logging
from typing import Any

from fastapi import status

from booking_engine.api.schemas.bookings import BookingResponse, CreateBookingRequest
from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.car_reader import CarReader
from booking_engine.application.interfaces.clock import Clock
from booking_engine.application.interfaces.coupon_repo import CouponRepo
from booking_engine.application.interfaces.idempotency_repo import (
    IdempotencyRecord,
    IdempotencyRepo,
)
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.application.use_cases.check_availability import ensure_available
from booking_engine.application.use_cases.validate_coupon import ValidateCouponUseCase
from booking_engine.domain.entities.booking import (
    DEFAULT_MAX_RESCHEDULE_COUNT,
    Booking,
    DeliveryType,
)
from booking_engine.domain.errors import (
    CarNotFoundError,
    CouponInvalidError,
    IdempotencyConflictError,
)
from booking_engine.domain.services.pricing import compute_breakdown
from booking_engine.domain.value_objects.datetime_range import DatetimeRange

logger = logging.getLogger(__name__)

SCOPE = "BOOKING_CREATE"


def _hash_request(payload: dict[str, Any]) -> str:
    normalized = json.dumps(payload, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(normalized.encode()).hexdigest()


class CreateBookingUseCase:
    """
    Reserve a car: availability, coupon, pricing, then persist in ``pending``.

    Everything runs in one transaction. The car row is locked first so two
    creations for the same car serialize, and the coupon counter moves through
    a conditional update.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        car_reader: CarReader,
        coupon_repo: CouponRepo,
        idempotency_repo: IdempotencyRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        max_reschedule_count: int = DEFAULT_MAX_RESCHEDULE_COUNT,
    ) -> None:
        self._booking_repo = booking_repo
        self._car_reader = car_reader
        self._coupon_repo = coupon_repo
        self._idempotency_repo = idempotency_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._max_reschedule_count = max_reschedule_count
        self._coupons = ValidateCouponUseCase(
            coupon_repo=coupon_repo,
            booking_repo=booking_repo,
            transaction_manager=transaction_manager,
            clock=clock,
        )

    async def execute(
        self,
        request: CreateBookingRequest,
        idem_key: str | None = None,
    ) -> BookingResponse:
        request_hash = _hash_request(request.model_dump(mode="json"))
        window = DatetimeRange(start=request.start_date, end=request.end_date)

        async with self._transaction_manager.start():
            if idem_key:
                existing = await self._idempotency_repo.get(scope=SCOPE, idem_key=idem_key)
                if existing:
                    if existing.request_hash != request_hash:
                        raise IdempotencyConflictError(idem_key, SCOPE)
                    logger.info(
                        "Idempotent replay of booking creation",
                        extra={"idem_key": idem_key, "booking_id": existing.reference_booking_id},
                    )
                    return BookingResponse.model_validate(existing.response_json)

            car = await self._car_reader.get_car(request.car_id, for_update=True)
            if car is None:
                raise CarNotFoundError(request.car_id)
            await ensure_available(self._booking_repo, car, window)

            insurance = (
                request.insurance_amount
                if request.insurance_amount is not None
                else car.insurance_amount
            )
            delivery = (
                request.delivery_charges
                if request.delivery_type == DeliveryType.DELIVERY
                else None
            )
            undiscounted = compute_breakdown(car, window.rental_days, insurance, delivery)

            coupon_id = None
            discount = None
            if request.coupon_code:
                # The discount applies to the rental itself, not insurance or delivery.
                validation = await self._coupons.validate(
                    request.coupon_code, undiscounted.base_price, user_id=request.user_id
                )
                if not await self._coupon_repo.increment_usage(validation.coupon.id):
                    raise CouponInvalidError(
                        CouponInvalidError.EXHAUSTED, "Coupon usage limit has been reached"
                    )
                coupon_id = validation.coupon.id
                discount = validation.discount_amount

            breakdown = compute_breakdown(car, window.rental_days, insurance, delivery, discount)
            now = self._clock.now()
            booking = await self._booking_repo.create(
                Booking(
                    user_id=request.user_id,
                    car_id=car.id,
                    pickup_parking_id=request.pickup_parking_id or car.parking_id,
                    dropoff_parking_id=request.dropoff_parking_id or car.parking_id,
                    coupon_id=coupon_id,
                    start_date=window.start,
                    end_date=window.end,
                    pickup_date=request.pickup_date or window.start,
                    max_reschedule_count=self._max_reschedule_count,
                    base_price=breakdown.base_price,
                    insurance_amount=breakdown.insurance_amount,
                    delivery_charges=breakdown.delivery_charges,
                    discount_amount=breakdown.discount_amount,
                    total_price=breakdown.total_price,
                    advance_amount=breakdown.advance_amount,
                    remaining_amount=breakdown.remaining_amount,
                    delivery_type=request.delivery_type,
                    delivery_address=request.delivery_address,
                    created_at=now,
                    updated_at=now,
                )
            )
            response = BookingResponse.from_entity(booking)

            if idem_key:
                await self._idempotency_repo.save(
                    IdempotencyRecord(
                        scope=SCOPE,
                        idem_key=idem_key,
                        request_hash=request_hash,
                        response_json=json.loads(response.model_dump_json()),
                        http_status=status.HTTP_201_CREATED,
                        reference_booking_id=booking.id,
                    )
                )

        logger.info(
            "Booking created",
            extra={
                "booking_id": booking.id,
                "car_id": booking.car_id,
                "user_id": booking.user_id,
                "to_status": booking.status.value,
                "total_price": str(booking.total_price),
                "coupon_id": coupon_id,
            },
        )
        return response
