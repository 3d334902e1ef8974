"""
Pickup OTP policy.

Codes are four digits. Expiry follows the pickup time: when pickup is two
hours away or less the code lives until 30 minutes before pickup, otherwise it
lives for 15 minutes.
"""

import re
import secrets
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from booking_engine.domain.errors import OtpError

if TYPE_CHECKING:
    from booking_engine.domain.entities.booking import Booking

OTP_LENGTH = 4
OTP_PATTERN = re.compile(r"[0-9]{4}")
SHORT_NOTICE_WINDOW = timedelta(hours=2)
PICKUP_LEAD_TIME = timedelta(minutes=30)
DEFAULT_TTL = timedelta(minutes=15)
REGENERATE_TOLERANCE = timedelta(minutes=5)


def generate_code() -> str:
    return f"{secrets.randbelow(9000) + 1000:0{OTP_LENGTH}d}"


def expiry_for_pickup(pickup_at: datetime, now: datetime) -> datetime:
    if pickup_at - now <= SHORT_NOTICE_WINDOW:
        return pickup_at - PICKUP_LEAD_TIME
    return now + DEFAULT_TTL


def should_regenerate(
    current_expires_at: datetime | None, pickup_at: datetime, now: datetime
) -> bool:
    if current_expires_at is None:
        return True
    expected = expiry_for_pickup(pickup_at, now)
    return abs(expected - current_expires_at) > REGENERATE_TOLERANCE


def check_code(booking: "Booking", code: str, now: datetime) -> None:
    """Raise ``OtpError`` unless ``code`` unlocks the booking right now."""
    if not booking.otp_code:
        raise OtpError(OtpError.NOT_FOUND, "No OTP found for this booking")
    if booking.otp_verified:
        raise OtpError(OtpError.ALREADY_VERIFIED, "OTP has already been verified")
    if booking.otp_expires_at and now > booking.otp_expires_at:
        raise OtpError(OtpError.EXPIRED, "OTP has expired. Please request a new one")
    if not OTP_PATTERN.fullmatch(code or ""):
        raise OtpError(OtpError.INVALID_FORMAT, "Invalid OTP format. Please enter a 4-digit code")
    if not secrets.compare_digest(code, booking.otp_code):
        raise OtpError(OtpError.MISMATCH, "Invalid OTP. Please check and try again")
