from datetime import datetime, timedelta, timezone

from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.services.availability import blocks_window, find_conflicts
from booking_engine.domain.services.state_machine import BookingStatus

DAY = timedelta(days=1)
T = datetime(2026, 7, 1, tzinfo=timezone.utc)


def _booking(booking_id=1, start=T, end=T + 2 * DAY, status=BookingStatus.PENDING, **kwargs):
    return Booking(id=booking_id, car_id=1, start_date=start, end_date=end, status=status, **kwargs)


def test_overlap_blocks():
    assert blocks_window(_booking(), T + DAY, T + 3 * DAY)


def test_back_to_back_windows_do_not_overlap():
    assert not blocks_window(_booking(), T + 2 * DAY, T + 4 * DAY)
    assert not blocks_window(_booking(), T - 2 * DAY, T)


def test_terminal_bookings_never_block():
    for status in (BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.DENIED):
        assert not blocks_window(_booking(status=status), T, T + DAY)


def test_extension_extends_held_window():
    extended = _booking(status=BookingStatus.ACTIVE, extension_till=T + 3 * DAY)
    assert blocks_window(extended, T + 2 * DAY, T + 4 * DAY)


def test_excluded_booking_is_ignored():
    assert not blocks_window(_booking(booking_id=5), T, T + DAY, exclude_booking_id=5)


def test_find_conflicts_returns_only_blocking():
    bookings = [
        _booking(1),
        _booking(2, status=BookingStatus.CANCELLED),
        _booking(3, start=T + 5 * DAY, end=T + 6 * DAY),
    ]
    assert [b.id for b in find_conflicts(bookings, T, T + DAY)] == [1]
