import logging
from dataclasses import dataclass, field
from datetime import datetime

from booking_engine.api.schemas.availability import AvailabilityRequest
from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.application.interfaces.car_reader import CarReader
from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.domain.entities.car import Car
from booking_engine.domain.errors import AvailabilityConflictError, CarNotFoundError
from booking_engine.domain.services.availability import find_conflicts
from booking_engine.domain.value_objects.datetime_range import DatetimeRange

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityResult:
    car_id: int
    available: bool
    reason: str | None = None
    conflicting_booking_ids: list[int] = field(default_factory=list)


async def evaluate_availability(
    booking_repo: BookingRepo,
    car: Car,
    window: DatetimeRange,
    exclude_booking_id: int | None = None,
) -> AvailabilityResult:
    """
    Decide availability of an already loaded car.

    The car status is only a fast path; the overlap query is authoritative.
    """
    if not car.accepts_bookings:
        return AvailabilityResult(
            car_id=car.id,
            available=False,
            reason=f"Car is {car.status.value}",
        )
    candidates = await booking_repo.list_blocking_for_car(
        car.id, window.start, window.end, exclude_booking_id=exclude_booking_id
    )
    conflicts = find_conflicts(candidates, window.start, window.end, exclude_booking_id)
    if conflicts:
        return AvailabilityResult(
            car_id=car.id,
            available=False,
            reason="Car is already booked for the selected dates",
            conflicting_booking_ids=[b.id for b in conflicts],
        )
    return AvailabilityResult(car_id=car.id, available=True)


async def ensure_available(
    booking_repo: BookingRepo,
    car: Car,
    window: DatetimeRange,
    exclude_booking_id: int | None = None,
) -> None:
    result = await evaluate_availability(booking_repo, car, window, exclude_booking_id)
    if not result.available:
        logger.info(
            "Availability conflict",
            extra={
                "car_id": car.id,
                "start": window.start.isoformat(),
                "end": window.end.isoformat(),
                "conflicts": result.conflicting_booking_ids,
            },
        )
        raise AvailabilityConflictError(car.id, reason=result.reason)


class CheckAvailabilityUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        car_reader: CarReader,
        transaction_manager: TransactionManager,
    ) -> None:
        self._booking_repo = booking_repo
        self._car_reader = car_reader
        self._transaction_manager = transaction_manager

    async def _evaluate(
        self,
        car_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: int | None,
    ) -> AvailabilityResult:
        window = DatetimeRange(start=start, end=end)
        async with self._transaction_manager.start():
            car = await self._car_reader.get_car(car_id)
            if car is None:
                raise CarNotFoundError(car_id)
            return await evaluate_availability(
                self._booking_repo, car, window, exclude_booking_id
            )

    async def is_available(
        self,
        car_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: int | None = None,
    ) -> bool:
        result = await self._evaluate(car_id, start, end, exclude_booking_id)
        return result.available

    async def check(
        self,
        car_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: int | None = None,
    ) -> None:
        result = await self._evaluate(car_id, start, end, exclude_booking_id)
        if not result.available:
            raise AvailabilityConflictError(car_id, reason=result.reason)

    async def execute(self, request: AvailabilityRequest) -> AvailabilityResult:
        return await self._evaluate(
            request.car_id, request.start_date, request.end_date, request.exclude_booking_id
        )
