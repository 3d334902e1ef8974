from typing import Sequence

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.application.interfaces.payment_repo import PaymentRepo
from booking_engine.domain.entities.payment import Payment, PaymentEventStatus, PaymentMilestone
from booking_engine.infrastructure.db.repositories.rows import to_entity, to_row
from booking_engine.infrastructure.db.tables import payments

PAYMENT_ENUMS = {"milestone": PaymentMilestone, "status": PaymentEventStatus}


class PaymentRepoSQL(PaymentRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(self, payment: Payment) -> Payment:
        result = await self._session.execute(insert(payments).values(to_row(payment)))
        payment.id = result.inserted_primary_key[0]
        return payment

    async def list_payments(self, booking_id: int) -> Sequence[Payment]:
        stmt = select(payments).where(payments.c.booking_id == booking_id).order_by(payments.c.id)
        result = await self._session.execute(stmt)
        return [to_entity(Payment, row, PAYMENT_ENUMS) for row in result.mappings().all()]
