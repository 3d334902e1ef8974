from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.application.interfaces.pic_verification_repo import PicVerificationRepo
from booking_engine.domain.entities.pic_verification import (
    ConditionGrade,
    PicVerification,
    VerificationStatus,
    VerificationType,
)
from booking_engine.domain.errors import StaleWriteError, VerificationNotFoundError
from booking_engine.infrastructure.db.repositories.rows import to_entity, to_row
from booking_engine.infrastructure.db.tables import pic_verifications

VERIFICATION_ENUMS = {
    "verification_type": VerificationType,
    "status": VerificationStatus,
    "engine_condition": ConditionGrade,
    "body_condition": ConditionGrade,
    "interior_condition": ConditionGrade,
    "tire_condition": ConditionGrade,
}


def _to_verification(row) -> PicVerification:
    return to_entity(PicVerification, row, VERIFICATION_ENUMS)


class PicVerificationRepoSQL(PicVerificationRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, verification: PicVerification) -> PicVerification:
        verification.lock_version = 0
        result = await self._session.execute(
            insert(pic_verifications).values(to_row(verification))
        )
        verification.id = result.inserted_primary_key[0]
        return verification

    async def get(self, verification_id: int) -> PicVerification | None:
        stmt = select(pic_verifications).where(pic_verifications.c.id == verification_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_verification(row) if row else None

    async def get_verification(
        self,
        car_id: int,
        verification_type: VerificationType,
        booking_id: int,
    ) -> PicVerification | None:
        stmt = (
            select(pic_verifications)
            .where(
                pic_verifications.c.car_id == car_id,
                pic_verifications.c.verification_type == verification_type.value,
                pic_verifications.c.booking_id == booking_id,
            )
            .order_by(pic_verifications.c.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_verification(row) if row else None

    async def update(
        self, verification: PicVerification, expected_lock_version: int
    ) -> PicVerification:
        values = to_row(verification, exclude=("id", "created_at"))
        values["lock_version"] = expected_lock_version + 1
        stmt = (
            update(pic_verifications)
            .where(
                pic_verifications.c.id == verification.id,
                pic_verifications.c.lock_version == expected_lock_version,
            )
            .values(values)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            if await self.get(verification.id) is None:
                raise VerificationNotFoundError(verification.id)
            raise StaleWriteError("pic_verification", verification.id, expected_lock_version)
        verification.lock_version = expected_lock_version + 1
        return verification
