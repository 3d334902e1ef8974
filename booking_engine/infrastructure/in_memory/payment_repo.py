import copy
from collections import defaultdict
from typing import Sequence

from booking_engine.application.interfaces.payment_repo import PaymentRepo
from booking_engine.domain.entities.payment import Payment
from booking_engine.infrastructure.in_memory.store import InMemoryStore


class InMemoryPaymentRepo(PaymentRepo, InMemoryStore):
    def __init__(self) -> None:
        self._by_id: dict[int, Payment] = {}
        self._by_booking: dict[int, list[int]] = defaultdict(list)
        self._next_id = 1

    async def record(self, payment: Payment) -> Payment:
        payment.id = self._next_id
        self._next_id += 1
        self._by_id[payment.id] = copy.deepcopy(payment)
        self._by_booking[payment.booking_id].append(payment.id)
        return payment

    async def list_payments(self, booking_id: int) -> Sequence[Payment]:
        return [copy.deepcopy(self._by_id[pid]) for pid in self._by_booking.get(booking_id, [])]
