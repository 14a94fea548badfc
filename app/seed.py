"""Reconcile the location registry with the predefined list.

Usage: ``python -m app.seed``
"""
import asyncio
import logging

from app.core.config import settings
from app.core.database import Database
from app.core.logging import setup_logging
from app.services.locations import PREDEFINED_LOCATIONS, reconcile_locations

logger = logging.getLogger("app.seed")


async def seed_locations(database: Database, names: list[str] | None = None) -> tuple[int, int]:
    async with database.session() as db:
        created, updated = await reconcile_locations(db, names)
    logger.info("Location seeding completed: %d created, %d updated", created, updated)
    return created, updated


async def main() -> None:
    database = Database(settings.DATABASE_URL)
    await database.connect()
    try:
        await database.create_all()
        await seed_locations(database, PREDEFINED_LOCATIONS)
    finally:
        await database.close()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
