from typing import Sequence

from booking_engine.domain.entities.payment import Payment


class PaymentRepo:
    async def record(self, payment: Payment) -> Payment:
        raise NotImplementedError

    async def list_payments(self, booking_id: int) -> Sequence[Payment]:
        raise NotImplementedError
