"""Base for dict-backed repositories with snapshot/restore for rollback."""

import copy
from typing import Any


class InMemoryStore:
    """
    Repositories keep their state in instance attributes and hand out copies,
    so callers never mutate stored rows behind the repository's back.
    """

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self.__dict__)

    def restore(self, state: dict[str, Any]) -> None:
        self.__dict__.clear()
        self.__dict__.update(state)
