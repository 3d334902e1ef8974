"""Recreate the tables and load a small demo catalogue: cars, coupons and topups."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from booking_engine.api.deps import engine
from booking_engine.infrastructure.db.tables import cars, coupons, metadata, topups

logger = logging.getLogger(__name__)


async def seed():
    now = datetime.now(timezone.utc)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)
        logger.info("Recreated all tables")

        await conn.execute(
            cars.insert(),
            [
                {"name": "Swift Dzire", "price": Decimal("1000"), "discount_price": None, "insurance_amount": Decimal("500"),
                 "status": "available", "parking_id": 1},
                {"name": "Innova Crysta", "price": Decimal("2500"), "discount_price": Decimal("2200"),
                 "insurance_amount": Decimal("800"), "status": "available", "parking_id": 1},
                {"name": "Nexon EV", "price": Decimal("1800"), "discount_price": None, "insurance_amount": Decimal("600"),
                 "status": "available", "parking_id": 2},
            ],
        )
        await conn.execute(
            coupons.insert(),
            [
                {"code": "WELCOME10", "name": "Welcome", "discount_type": "percentage",
                 "discount_amount": Decimal("10"), "min_booking_amount": Decimal("0"),
                 "max_discount_amount": Decimal("500"), "start_date": now,
                 "end_date": now + timedelta(days=365), "usage_limit": None, "per_user_limit": 1},
                {"code": "SUMMER25", "name": "Summer sale", "discount_type": "percentage",
                 "discount_amount": Decimal("25"), "min_booking_amount": Decimal("2000"),
                 "max_discount_amount": Decimal("1000"), "start_date": now,
                 "end_date": now + timedelta(days=90), "usage_limit": 100, "per_user_limit": 1},
            ],
        )
        await conn.execute(
            topups.insert(),
            [
                {"name": "Extra 6 hours", "duration_hours": 6, "price": Decimal("400")},
                {"name": "Extra day", "duration_hours": 24, "price": Decimal("1200")},
            ],
        )
        logger.info("Seeded cars, coupons and topups")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
