"""
Liveness and readiness checks.

Readiness in SQL mode runs a count over the car catalogue, so it fails both
when the database is down and when the schema has not been created yet.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.api.dependencies import get_session
from booking_engine.infrastructure.db.tables import cars

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "service": "booking-engine"}


@router.get("/health/ready")
async def health_check_ready(session: AsyncSession | None = Depends(get_session)):
    if session is None:
        return {"status": "ready", "storage": "in_memory"}

    try:
        car_count = (await session.execute(select(func.count()).select_from(cars))).scalar_one()
    except Exception as exc:
        logger.error("Readiness check could not read the car catalogue", exc_info=exc)
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "storage": "sql", "database": "unreachable"},
        )
    return {"status": "ready", "storage": "sql", "cars": car_count}
