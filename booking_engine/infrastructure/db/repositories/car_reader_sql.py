from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.application.interfaces.car_reader import CarReader
from booking_engine.domain.entities.car import Car, CarStatus
from booking_engine.infrastructure.db.repositories.rows import to_entity
from booking_engine.infrastructure.db.tables import cars


class CarReaderSQL(CarReader):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_car(self, car_id: int, for_update: bool = False) -> Car | None:
        stmt = select(cars).where(cars.c.id == car_id).limit(1)
        if for_update:
            # Serializes concurrent creations for the same car until commit.
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return to_entity(Car, row, {"status": CarStatus}) if row else None
