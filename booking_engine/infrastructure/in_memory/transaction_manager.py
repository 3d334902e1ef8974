import asyncio
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from contextvars import ContextVar

from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.infrastructure.in_memory.store import InMemoryStore


class InMemoryTransactionManager(TransactionManager):
    """
    Serializes transactions with one ``asyncio.Lock`` and rolls the stores
    back to their snapshot when the block raises. Nested ``start()`` calls in
    the same task join the outer transaction.
    """

    def __init__(self, stores: Sequence[InMemoryStore] = ()) -> None:
        self._stores = list(stores)
        self._lock = asyncio.Lock()
        self._active: ContextVar[bool] = ContextVar(f"in_memory_tx_{id(self)}", default=False)

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._active.get():
            yield
            return
        async with self._lock:
            token = self._active.set(True)
            snapshots = [store.snapshot() for store in self._stores]
            try:
                yield
            except BaseException:
                for store, state in zip(self._stores, snapshots):
                    store.restore(state)
                raise
            finally:
                self._active.reset(token)
