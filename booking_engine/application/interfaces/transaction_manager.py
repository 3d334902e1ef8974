from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol


class TransactionManager(Protocol):
    """
    Unit of work around one booking operation.

    Everything a use case reads and writes inside ``start()`` commits together
    or not at all. A nested ``start()`` joins the transaction already open.
    """

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield
