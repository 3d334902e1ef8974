import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from booking_engine.api.deps import engine
from booking_engine.api.routers.availability import router as availability_router
from booking_engine.api.routers.bookings import router as bookings_router
from booking_engine.api.routers.coupons import router as coupons_router
from booking_engine.api.routers.health import router as health_router
from booking_engine.api.routers.payments import router as payments_router
from booking_engine.api.routers.pic import router as pic_router
from booking_engine.config import get_settings
from booking_engine.domain.errors import (
    AvailabilityConflictError,
    BookingAccessDeniedError,
    BookingNotFoundError,
    CarNotFoundError,
    CouponInvalidError,
    DomainError,
    IdempotencyConflictError,
    IllegalTransitionError,
    OtpError,
    RescheduleLimitExceededError,
    StaleWriteError,
    TopupNotFoundError,
    ValidationError,
    VerificationNotFoundError,
)
from booking_engine.infrastructure.db.tables import metadata

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[DomainError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    BookingNotFoundError: status.HTTP_404_NOT_FOUND,
    CarNotFoundError: status.HTTP_404_NOT_FOUND,
    TopupNotFoundError: status.HTTP_404_NOT_FOUND,
    VerificationNotFoundError: status.HTTP_404_NOT_FOUND,
    AvailabilityConflictError: status.HTTP_409_CONFLICT,
    IllegalTransitionError: status.HTTP_409_CONFLICT,
    StaleWriteError: status.HTTP_409_CONFLICT,
    IdempotencyConflictError: status.HTTP_409_CONFLICT,
    CouponInvalidError: status.HTTP_400_BAD_REQUEST,
    RescheduleLimitExceededError: status.HTTP_400_BAD_REQUEST,
    OtpError: status.HTTP_400_BAD_REQUEST,
    BookingAccessDeniedError: status.HTTP_403_FORBIDDEN,
}


def status_code_for(exc: DomainError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.use_in_memory:
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
    yield
    await engine.dispose()

app = FastAPI(
    title="Car Rental Booking Engine",
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    status_code = status_code_for(exc)
    logger.info(
        "Domain error",
        extra={"code": exc.code, "path": request.url.path, "status_code": status_code},
    )
    content = {"detail": exc.message, "code": exc.code}
    reason = getattr(exc, "reason", None)
    if reason:
        content["reason"] = reason
    return JSONResponse(status_code=status_code, content=content)


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Unhandled exceptions are logged with an error_id and answered with a
    generic 500 so no stack trace reaches the client.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists."
        }
    )


app.include_router(health_router, tags=["Health"])
app.include_router(bookings_router, prefix="/api/v1", tags=["Bookings"])
app.include_router(availability_router, prefix="/api/v1", tags=["Availability"])
app.include_router(coupons_router, prefix="/api/v1", tags=["Coupons"])
app.include_router(payments_router, prefix="/api/v1", tags=["Payments"])
app.include_router(pic_router, prefix="/api/v1", tags=["PIC"])


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
