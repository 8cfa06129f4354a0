# File: src/breadpos/scripts/seed.py
"""Seed a fresh database with settings, discount presets, an admin and a starter catalog.

Usage:
    SEED_ADMIN_PIN=4321 breadpos-seed

Re-running is safe: existing rows are left alone.
"""

import asyncio
import os
from decimal import Decimal

from sqlalchemy import select

import breadpos.models  # noqa: F401  (register tables on Base.metadata)
from breadpos.core.cart import DEFAULT_DISCOUNTS
from breadpos.core.db import AsyncSessionLocal, Base, engine
from breadpos.core.logging import configure_logging, get_logger
from breadpos.core.security import hash_pin
from breadpos.models import DiscountPreset, PosSettings, Product, Staff, StaffRole
from breadpos.models.settings import POS_SETTINGS_ID

logger = get_logger(__name__)

SAMPLE_PRODUCTS = (
    {"name": "Pandesal", "category": "Bread", "price": Decimal("5.00"), "cost": Decimal("2.50")},
    {"name": "Spanish Bread", "category": "Bread", "price": Decimal("10.00"), "cost": Decimal("5.00")},
    {"name": "Ensaymada", "category": "Pastry", "price": Decimal("35.00"), "cost": Decimal("18.00")},
    {
        "name": "Cheese Roll",
        "category": "Pastry",
        "variants": [
            {"name": "Single", "price": "15.00", "cost": "7.00"},
            {"name": "Box of 6", "price": "85.00", "cost": "42.00"},
        ],
    },
    {"name": "Ube Cake", "category": "Cakes", "price": Decimal("450.00"), "cost": Decimal("260.00")},
)


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        async with session.begin():
            if await session.get(PosSettings, POS_SETTINGS_ID) is None:
                session.add(PosSettings(id=POS_SETTINGS_ID))
                logger.info("seed.settings_created")

            for order, preset in enumerate(DEFAULT_DISCOUNTS):
                if await session.get(DiscountPreset, preset["id"]) is None:
                    session.add(DiscountPreset(**preset, sort_order=order))
                    logger.info("seed.discount_created", discount_id=preset["id"])

            admin_name = os.getenv("SEED_ADMIN_NAME", "Admin")
            existing = await session.execute(select(Staff).where(Staff.name == admin_name))
            if existing.scalar_one_or_none() is None:
                session.add(
                    Staff(
                        name=admin_name,
                        hashed_pin=hash_pin(os.getenv("SEED_ADMIN_PIN", "1234")),
                        role=StaffRole.ADMIN.value,
                    )
                )
                logger.info("seed.admin_created", name=admin_name)

            products = await session.execute(select(Product.id).limit(1))
            if products.first() is None:
                for data in SAMPLE_PRODUCTS:
                    session.add(Product(**{"main_category": "Bakery", "variants": [], **data}))
                logger.info("seed.products_created", count=len(SAMPLE_PRODUCTS))

    await engine.dispose()


def main() -> None:
    configure_logging()
    asyncio.run(seed())


if __name__ == "__main__":
    main()
