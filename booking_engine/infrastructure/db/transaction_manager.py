import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.application.interfaces.transaction_manager import TransactionManager
from booking_engine.domain.errors import DomainError

logger = logging.getLogger(__name__)


class SQLAlchemyTransactionManager(TransactionManager):
    """
    ``session.begin()`` per booking operation.

    Row locks taken with ``for_update`` and the conditional coupon and
    ``lock_version`` updates all live until this block exits.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._session.in_transaction():
            yield
            return
        try:
            async with self._session.begin():
                yield
        except DomainError as exc:
            logger.debug("Booking transaction rolled back", extra={"code": exc.code})
            raise
