"""Clock port. Every use case reads time through it so tests can freeze it."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from booking_engine.domain.value_objects.datetime_range import ensure_utc


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware UTC."""
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FakeClock(Clock):
    """
    Fixed clock for deterministic tests.

    Naive values passed in are taken as UTC.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = ensure_utc(fixed_time or datetime.now(timezone.utc))

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, new_time: datetime) -> None:
        self._fixed_time = ensure_utc(new_time)

    def advance(self, seconds: int = 0, minutes: int = 0, hours: int = 0, days: int = 0) -> None:
        delta = timedelta(seconds=seconds, minutes=minutes, hours=hours, days=days)
        self._fixed_time = self._fixed_time + delta
