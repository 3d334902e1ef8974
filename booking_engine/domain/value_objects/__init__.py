"""Value Objects of the booking domain."""

from booking_engine.domain.value_objects.datetime_range import DatetimeRange, ensure_utc
from booking_engine.domain.value_objects.money import round_to_unit, to_money

__all__ = [
    "DatetimeRange",
    "ensure_utc",
    "round_to_unit",
    "to_money",
]
