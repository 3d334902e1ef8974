from booking_engine.domain.entities.car import Car


class CarReader:
    async def get_car(self, car_id: int, for_update: bool = False) -> Car | None:
        """
        Load a car. ``for_update`` takes a row lock for the rest of the
        transaction where the store supports it.
        """
        raise NotImplementedError
