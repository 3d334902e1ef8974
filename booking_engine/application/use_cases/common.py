"""Helpers shared by the booking use cases."""

import logging

from booking_engine.application.interfaces.booking_repo import BookingRepo
from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.errors import BookingAccessDeniedError, BookingNotFoundError
from booking_engine.domain.services.state_machine import BookingStatus

logger = logging.getLogger("booking_engine.transitions")


async def load_booking(booking_repo: BookingRepo, booking_id: int) -> Booking:
    booking = await booking_repo.get(booking_id)
    if booking is None:
        raise BookingNotFoundError(booking_id)
    return booking


def ensure_owner(booking: Booking, user_id: int, operation: str) -> None:
    if booking.user_id != user_id:
        raise BookingAccessDeniedError(booking.id, operation)


def log_transition(booking: Booking, previous: BookingStatus, event: str) -> None:
    logger.info(
        "Booking %s: %s -> %s (%s)",
        booking.id,
        previous.value,
        booking.status.value,
        event,
        extra={
            "booking_id": booking.id,
            "from_status": previous.value,
            "to_status": booking.status.value,
            "event": event,
        },
    )
