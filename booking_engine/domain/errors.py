"""Domain exceptions for the booking engine."""


class DomainError(Exception):
    """Base class for every domain error."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Input ===


class ValidationError(DomainError):
    """Malformed input, rejected before any mutation."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validation failed on '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field


class IdempotencyConflictError(DomainError):
    """Same idempotency key reused with a different request."""

    def __init__(self, idem_key: str, scope: str):
        super().__init__(
            message=f"Idempotency conflict: key '{idem_key}' in scope '{scope}' "
            f"already exists with a different request hash",
            code="IDEMPOTENCY_CONFLICT",
        )
        self.idem_key = idem_key
        self.scope = scope


# === Lookups ===


class BookingNotFoundError(DomainError):
    def __init__(self, booking_id: int):
        super().__init__(message=f"Booking not found: {booking_id}", code="BOOKING_NOT_FOUND")
        self.booking_id = booking_id


class CarNotFoundError(DomainError):
    def __init__(self, car_id: int):
        super().__init__(message=f"Car not found: {car_id}", code="CAR_NOT_FOUND")
        self.car_id = car_id


class TopupNotFoundError(DomainError):
    def __init__(self, topup_id: int, kind: str = "topup"):
        super().__init__(message=f"{kind.capitalize()} not found: {topup_id}", code="TOPUP_NOT_FOUND")
        self.topup_id = topup_id


class VerificationNotFoundError(DomainError):
    def __init__(self, verification_id: int):
        super().__init__(
            message=f"PIC verification not found: {verification_id}",
            code="VERIFICATION_NOT_FOUND",
        )
        self.verification_id = verification_id


class BookingAccessDeniedError(DomainError):
    """The caller does not own the booking (or inspection) it is acting on."""

    def __init__(self, booking_id: int, operation: str):
        super().__init__(
            message=f"Not allowed to {operation} booking {booking_id}",
            code="BOOKING_ACCESS_DENIED",
        )
        self.booking_id = booking_id
        self.operation = operation


# === Booking lifecycle ===


class AvailabilityConflictError(DomainError):
    """Car cannot be booked for the requested window."""

    def __init__(self, car_id: int, reason: str = "Car is already booked for the selected dates"):
        super().__init__(message=reason, code="AVAILABILITY_CONFLICT")
        self.car_id = car_id


class CouponInvalidError(DomainError):
    """Coupon rejected. ``reason`` is one of the COUPON_* constants below."""

    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    BELOW_MINIMUM = "below_minimum"
    PER_USER_LIMIT_REACHED = "per_user_limit_reached"

    def __init__(self, reason: str, message: str):
        super().__init__(message=message, code="COUPON_INVALID")
        self.reason = reason


class RescheduleLimitExceededError(DomainError):
    def __init__(self, booking_id: int, max_reschedule_count: int):
        super().__init__(
            message=f"Maximum reschedule limit ({max_reschedule_count}) reached",
            code="RESCHEDULE_LIMIT_EXCEEDED",
        )
        self.booking_id = booking_id
        self.max_reschedule_count = max_reschedule_count


class OtpError(DomainError):
    NOT_FOUND = "not_found"
    ALREADY_VERIFIED = "already_verified"
    EXPIRED = "expired"
    INVALID_FORMAT = "invalid_format"
    MISMATCH = "mismatch"

    def __init__(self, reason: str, message: str):
        super().__init__(message=message, code="OTP_ERROR")
        self.reason = reason


class IllegalTransitionError(DomainError):
    """A state-machine guard failed."""

    def __init__(self, booking_id: int | None, current_status: str, event: str, detail: str | None = None):
        message = f"Cannot apply '{event}' to booking {booking_id} in status '{current_status}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message=message, code="ILLEGAL_TRANSITION")
        self.booking_id = booking_id
        self.current_status = current_status
        self.event = event
        self.detail = detail


class StaleWriteError(DomainError):
    """Concurrent modification detected by the lock_version guard."""

    def __init__(self, entity: str, entity_id: int, expected_version: int):
        super().__init__(
            message=f"Concurrent modification of {entity} {entity_id}: "
            f"expected version {expected_version}",
            code="STALE_WRITE",
        )
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
