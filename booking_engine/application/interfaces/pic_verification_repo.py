from booking_engine.domain.entities.pic_verification import PicVerification, VerificationType


class PicVerificationRepo:
    async def create(self, verification: PicVerification) -> PicVerification:
        raise NotImplementedError

    async def get(self, verification_id: int) -> PicVerification | None:
        raise NotImplementedError

    async def get_verification(
        self,
        car_id: int,
        verification_type: VerificationType,
        booking_id: int,
    ) -> PicVerification | None:
        """Most recent inspection of this type for the car and booking."""
        raise NotImplementedError

    async def update(
        self, verification: PicVerification, expected_lock_version: int
    ) -> PicVerification:
        raise NotImplementedError
