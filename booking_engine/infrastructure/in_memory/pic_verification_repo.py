import copy

from booking_engine.application.interfaces.pic_verification_repo import PicVerificationRepo
from booking_engine.domain.entities.pic_verification import PicVerification, VerificationType
from booking_engine.domain.errors import StaleWriteError, VerificationNotFoundError
from booking_engine.infrastructure.in_memory.store import InMemoryStore


class InMemoryPicVerificationRepo(PicVerificationRepo, InMemoryStore):
    def __init__(self) -> None:
        self.verifications: dict[int, PicVerification] = {}
        self._next_id = 1

    async def create(self, verification: PicVerification) -> PicVerification:
        verification.id = self._next_id
        verification.lock_version = 0
        self._next_id += 1
        self.verifications[verification.id] = copy.deepcopy(verification)
        return verification

    async def get(self, verification_id: int) -> PicVerification | None:
        stored = self.verifications.get(verification_id)
        return copy.deepcopy(stored) if stored else None

    async def get_verification(
        self,
        car_id: int,
        verification_type: VerificationType,
        booking_id: int,
    ) -> PicVerification | None:
        matches = [
            v
            for v in self.verifications.values()
            if v.car_id == car_id
            and v.verification_type == verification_type
            and v.booking_id == booking_id
        ]
        if not matches:
            return None
        return copy.deepcopy(max(matches, key=lambda v: v.id))

    async def update(
        self, verification: PicVerification, expected_lock_version: int
    ) -> PicVerification:
        stored = self.verifications.get(verification.id)
        if stored is None:
            raise VerificationNotFoundError(verification.id)
        if stored.lock_version != expected_lock_version:
            raise StaleWriteError("pic_verification", verification.id, expected_lock_version)
        verification.lock_version = expected_lock_version + 1
        self.verifications[verification.id] = copy.deepcopy(verification)
        return verification
