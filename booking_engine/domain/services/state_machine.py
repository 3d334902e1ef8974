"""
Booking state machine.

The transition table below is the only authority on which lifecycle moves are
legal. Entities ask ``next_status`` for the target state and never set
``status`` any other way.
"""

from enum import Enum

from booking_engine.domain.errors import IllegalTransitionError


class BookingStatus(str, Enum):
    PENDING = "pending"
    ADVANCE_PAID = "advance_paid"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DENIED = "denied"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def blocks_availability(self) -> bool:
        return self in BLOCKING_STATUSES


class BookingEvent(str, Enum):
    ADVANCE_PAYMENT_COMPLETED = "advance_payment_completed"
    PIC_APPROVED = "pic_approved"
    PIC_REJECTED = "pic_rejected"
    OTP_VERIFIED = "otp_verified"
    RETURN_CONFIRMED = "return_confirmed"
    CANCEL = "cancel"


TERMINAL_STATUSES = frozenset(
    {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.DENIED}
)

BLOCKING_STATUSES = frozenset(
    {
        BookingStatus.PENDING,
        BookingStatus.ADVANCE_PAID,
        BookingStatus.CONFIRMED,
        BookingStatus.ACTIVE,
    }
)

RESCHEDULABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.ADVANCE_PAID})

TRANSITIONS: dict[tuple[BookingStatus, BookingEvent], BookingStatus] = {
    (BookingStatus.PENDING, BookingEvent.ADVANCE_PAYMENT_COMPLETED): BookingStatus.ADVANCE_PAID,
    (BookingStatus.ADVANCE_PAID, BookingEvent.PIC_APPROVED): BookingStatus.CONFIRMED,
    (BookingStatus.ADVANCE_PAID, BookingEvent.PIC_REJECTED): BookingStatus.DENIED,
    (BookingStatus.CONFIRMED, BookingEvent.OTP_VERIFIED): BookingStatus.ACTIVE,
    (BookingStatus.ACTIVE, BookingEvent.RETURN_CONFIRMED): BookingStatus.COMPLETED,
    **{
        (status, BookingEvent.CANCEL): BookingStatus.CANCELLED
        for status in BookingStatus
        if status not in TERMINAL_STATUSES
    },
}


def next_status(
    booking_id: int | None, current: BookingStatus, event: BookingEvent
) -> BookingStatus:
    """Return the state reached by ``event`` or raise ``IllegalTransitionError``."""
    try:
        return TRANSITIONS[(current, event)]
    except KeyError:
        detail = "booking is in a terminal state" if current.is_terminal else None
        raise IllegalTransitionError(booking_id, current.value, event.value, detail) from None


def can_transition(current: BookingStatus, event: BookingEvent) -> bool:
    return (current, event) in TRANSITIONS


def ensure_mutable(booking_id: int | None, current: BookingStatus, operation: str) -> None:
    """Terminal bookings accept no further lifecycle mutation."""
    if current.is_terminal:
        raise IllegalTransitionError(
            booking_id, current.value, operation, "booking is in a terminal state"
        )


def ensure_reschedulable(booking_id: int | None, current: BookingStatus) -> None:
    if current not in RESCHEDULABLE_STATUSES:
        raise IllegalTransitionError(
            booking_id,
            current.value,
            "reschedule",
            "only pending or advance-paid bookings can be rescheduled",
        )
