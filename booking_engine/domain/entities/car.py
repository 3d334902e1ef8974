"""Car entity. Read-only to the engine, owned by the fleet catalogue."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class CarStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    MAINTENANCE = "maintenance"
    UNAVAILABLE = "unavailable"


BOOKABLE_CAR_STATUSES = frozenset({CarStatus.AVAILABLE, CarStatus.BOOKED})


@dataclass
class Car:
    id: int | None = None
    name: str = ""
    price: Decimal = Decimal("0")
    discount_price: Decimal | None = None
    insurance_amount: Decimal = Decimal("0")
    status: CarStatus = CarStatus.AVAILABLE
    parking_id: int | None = None

    @property
    def daily_rate(self) -> Decimal:
        """Discounted rate when the vendor set one, list price otherwise."""
        if self.discount_price is not None and self.discount_price > 0:
            return self.discount_price
        return self.price

    @property
    def accepts_bookings(self) -> bool:
        # ``booked`` is advisory: the overlap check decides.
        return self.status in BOOKABLE_CAR_STATUSES
