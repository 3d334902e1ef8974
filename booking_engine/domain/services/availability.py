"""Overlap rules deciding whether a booking holds a car for a window."""

from datetime import datetime
from typing import TYPE_CHECKING, Iterable

from booking_engine.domain.services.state_machine import BLOCKING_STATUSES

if TYPE_CHECKING:
    from booking_engine.domain.entities.booking import Booking


def blocks_window(
    booking: "Booking",
    start: datetime,
    end: datetime,
    exclude_booking_id: int | None = None,
) -> bool:
    """
    True when ``booking`` holds the car somewhere inside ``[start, end)``.

    Paid extensions count: the held window ends at ``extension_till`` when that
    is later than ``end_date``.
    """
    if exclude_booking_id is not None and booking.id == exclude_booking_id:
        return False
    if booking.status not in BLOCKING_STATUSES:
        return False
    return booking.start_date < end and booking.effective_end_date > start


def find_conflicts(
    bookings: Iterable["Booking"],
    start: datetime,
    end: datetime,
    exclude_booking_id: int | None = None,
) -> list["Booking"]:
    return [b for b in bookings if blocks_window(b, start, end, exclude_booking_id)]
