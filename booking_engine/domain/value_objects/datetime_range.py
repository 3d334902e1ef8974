"""Value Object DatetimeRange - rental window for a booking."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from booking_engine.domain.errors import ValidationError


@dataclass(frozen=True)
class DatetimeRange:
    """
    Immutable start/end window.

    Attributes:
        start: Rental start (pickup side).
        end: Rental end (dropoff side).
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValidationError("end_date", "End date must be after start date")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def rental_days(self) -> int:
        """
        Number of billable days.

        Any fraction of a day counts as a full day, e.g. 25 hours = 2 days.
        """
        days = math.ceil(self.duration.total_seconds() / 86400)
        return max(1, days)

    def __str__(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC. Aware ones are converted to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
