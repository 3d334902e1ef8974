import copy

from booking_engine.application.interfaces.car_reader import CarReader
from booking_engine.domain.entities.car import Car
from booking_engine.infrastructure.in_memory.store import InMemoryStore


class InMemoryCarReader(CarReader, InMemoryStore):
    """Car catalogue stand-in. ``add`` is the seeding hook used by tests and scripts."""

    def __init__(self) -> None:
        self.cars: dict[int, Car] = {}
        self._next_id = 1

    def add(self, car: Car) -> Car:
        if car.id is None:
            car.id = self._next_id
        self._next_id = max(self._next_id, car.id + 1)
        self.cars[car.id] = copy.deepcopy(car)
        return car

    async def get_car(self, car_id: int, for_update: bool = False) -> Car | None:
        # The transaction lock already serializes writers.
        car = self.cars.get(car_id)
        return copy.deepcopy(car) if car else None
