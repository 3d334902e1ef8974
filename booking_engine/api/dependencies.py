from functools import lru_cache
from typing import Any

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.api.deps import AsyncSessionLocal
from booking_engine.application.interfaces.clock import SystemClock
from booking_engine.application.interfaces.code_generator import RandomOtpCodeGenerator
from booking_engine.application.use_cases.apply_topup import ApplyTopupUseCase
from booking_engine.application.use_cases.cancel_booking import CancelBookingUseCase
from booking_engine.application.use_cases.check_availability import CheckAvailabilityUseCase
from booking_engine.application.use_cases.confirm_return import ConfirmReturnUseCase
from booking_engine.application.use_cases.create_booking import CreateBookingUseCase
from booking_engine.application.use_cases.get_booking_status import (
    GetBookingStatusUseCase,
    GetBookingUseCase,
    ListOverdueUseCase,
)
from booking_engine.application.use_cases.handle_payment_event import HandlePaymentEventUseCase
from booking_engine.application.use_cases.manage_otp import GenerateOtpUseCase, VerifyOtpUseCase
from booking_engine.application.use_cases.pic_verification import (
    FinalizeVerificationUseCase,
    SubmitVerificationUseCase,
    UpdateVerificationUseCase,
)
from booking_engine.application.use_cases.reschedule_booking import RescheduleBookingUseCase
from booking_engine.application.use_cases.submit_confirmation import SubmitConfirmationUseCase
from booking_engine.application.use_cases.validate_coupon import ValidateCouponUseCase
from booking_engine.config import Settings, get_settings
from booking_engine.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from booking_engine.infrastructure.db.repositories.car_reader_sql import CarReaderSQL
from booking_engine.infrastructure.db.repositories.coupon_repo_sql import CouponRepoSQL
from booking_engine.infrastructure.db.repositories.idempotency_repo_sql import IdempotencyRepoSQL
from booking_engine.infrastructure.db.repositories.payment_repo_sql import PaymentRepoSQL
from booking_engine.infrastructure.db.repositories.pic_verification_repo_sql import (
    PicVerificationRepoSQL,
)
from booking_engine.infrastructure.db.repositories.topup_repo_sql import TopupRepoSQL
from booking_engine.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from booking_engine.infrastructure.in_memory import (
    InMemoryBookingRepo,
    InMemoryCarReader,
    InMemoryCouponRepo,
    InMemoryIdempotencyRepo,
    InMemoryPaymentRepo,
    InMemoryPicVerificationRepo,
    InMemoryTopupRepo,
    InMemoryTransactionManager,
)


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        yield session


def build_in_memory_bundle(clock=None, code_generator=None) -> dict[str, Any]:
    booking_repo = InMemoryBookingRepo()
    car_reader = InMemoryCarReader()
    coupon_repo = InMemoryCouponRepo()
    topup_repo = InMemoryTopupRepo()
    verification_repo = InMemoryPicVerificationRepo()
    payment_repo = InMemoryPaymentRepo()
    idempotency_repo = InMemoryIdempotencyRepo()
    tx_manager = InMemoryTransactionManager(
        stores=[
            booking_repo,
            car_reader,
            coupon_repo,
            topup_repo,
            verification_repo,
            payment_repo,
            idempotency_repo,
        ]
    )
    return {
        "booking_repo": booking_repo,
        "car_reader": car_reader,
        "coupon_repo": coupon_repo,
        "topup_repo": topup_repo,
        "verification_repo": verification_repo,
        "payment_repo": payment_repo,
        "idempotency_repo": idempotency_repo,
        "tx_manager": tx_manager,
        "clock": clock or SystemClock(),
        "code_generator": code_generator or RandomOtpCodeGenerator(),
    }


def build_sql_bundle(session: AsyncSession, clock=None, code_generator=None) -> dict[str, Any]:
    return {
        "booking_repo": BookingRepoSQL(session),
        "car_reader": CarReaderSQL(session),
        "coupon_repo": CouponRepoSQL(session),
        "topup_repo": TopupRepoSQL(session),
        "verification_repo": PicVerificationRepoSQL(session),
        "payment_repo": PaymentRepoSQL(session),
        "idempotency_repo": IdempotencyRepoSQL(session),
        "tx_manager": SQLAlchemyTransactionManager(session),
        "clock": clock or SystemClock(),
        "code_generator": code_generator or RandomOtpCodeGenerator(),
    }


@lru_cache(maxsize=1)
def _in_memory_bundle() -> dict[str, Any]:
    return build_in_memory_bundle()


def get_bundle(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
) -> dict[str, Any]:
    if settings.use_in_memory:
        return _in_memory_bundle()
    if not session:
        raise RuntimeError("DB session not available")
    return build_sql_bundle(session)


def build_use_cases(bundle: dict[str, Any], settings: Settings) -> dict[str, Any]:
    booking_repo = bundle["booking_repo"]
    tx = bundle["tx_manager"]
    clock = bundle["clock"]
    return {
        "create_booking": CreateBookingUseCase(
            booking_repo=booking_repo,
            car_reader=bundle["car_reader"],
            coupon_repo=bundle["coupon_repo"],
            idempotency_repo=bundle["idempotency_repo"],
            transaction_manager=tx,
            clock=clock,
            max_reschedule_count=settings.max_reschedule_count,
        ),
        "get_booking": GetBookingUseCase(
            booking_repo=booking_repo,
            payment_repo=bundle["payment_repo"],
            transaction_manager=tx,
        ),
        "get_booking_status": GetBookingStatusUseCase(
            booking_repo=booking_repo, transaction_manager=tx, clock=clock
        ),
        "list_overdue": ListOverdueUseCase(
            booking_repo=booking_repo,
            verification_repo=bundle["verification_repo"],
            transaction_manager=tx,
            clock=clock,
        ),
        "check_availability": CheckAvailabilityUseCase(
            booking_repo=booking_repo, car_reader=bundle["car_reader"], transaction_manager=tx
        ),
        "validate_coupon": ValidateCouponUseCase(
            coupon_repo=bundle["coupon_repo"],
            booking_repo=booking_repo,
            transaction_manager=tx,
            clock=clock,
        ),
        "handle_payment_event": HandlePaymentEventUseCase(
            booking_repo=booking_repo,
            topup_repo=bundle["topup_repo"],
            payment_repo=bundle["payment_repo"],
            code_generator=bundle["code_generator"],
            transaction_manager=tx,
            clock=clock,
        ),
        "submit_verification": SubmitVerificationUseCase(
            verification_repo=bundle["verification_repo"],
            booking_repo=booking_repo,
            transaction_manager=tx,
            clock=clock,
        ),
        "update_verification": UpdateVerificationUseCase(
            verification_repo=bundle["verification_repo"], transaction_manager=tx, clock=clock
        ),
        "finalize_verification": FinalizeVerificationUseCase(
            verification_repo=bundle["verification_repo"],
            booking_repo=booking_repo,
            transaction_manager=tx,
            clock=clock,
        ),
        "generate_otp": GenerateOtpUseCase(
            booking_repo=booking_repo,
            code_generator=bundle["code_generator"],
            transaction_manager=tx,
            clock=clock,
        ),
        "verify_otp": VerifyOtpUseCase(booking_repo=booking_repo, transaction_manager=tx, clock=clock),
        "reschedule_booking": RescheduleBookingUseCase(
            booking_repo=booking_repo,
            car_reader=bundle["car_reader"],
            code_generator=bundle["code_generator"],
            transaction_manager=tx,
            clock=clock,
        ),
        "apply_topup": ApplyTopupUseCase(
            booking_repo=booking_repo,
            topup_repo=bundle["topup_repo"],
            transaction_manager=tx,
            clock=clock,
        ),
        "confirm_return": ConfirmReturnUseCase(
            booking_repo=booking_repo,
            verification_repo=bundle["verification_repo"],
            transaction_manager=tx,
            clock=clock,
        ),
        "cancel_booking": CancelBookingUseCase(booking_repo=booking_repo, transaction_manager=tx, clock=clock),
        "submit_confirmation": SubmitConfirmationUseCase(
            booking_repo=booking_repo, transaction_manager=tx, clock=clock
        ),
    }


def get_use_cases(
    settings: Settings = Depends(get_settings),
    bundle: dict[str, Any] = Depends(get_bundle),
) -> dict[str, Any]:
    return build_use_cases(bundle, settings)
