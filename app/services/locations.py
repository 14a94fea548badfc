import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.creator import Creator
from app.models.location import CREATED_BY_ADMIN, CREATED_BY_SYSTEM, Location, location_key

logger = logging.getLogger(__name__)

PREDEFINED_LOCATIONS = [
    "Mumbai", "Delhi", "Bangalore", "Hyderabad", "Chennai", "Kolkata", "Pune",
    "Ahmedabad", "Jaipur", "Lucknow", "Kanpur", "Nagpur", "Indore", "Thane",
    "Bhopal", "Visakhapatnam", "Patna", "Vadodara", "Ghaziabad", "Ludhiana",
    "USA", "Canada", "UK", "Australia", "Singapore", "Dubai", "Germany", "France",
]


async def find_location(db: AsyncSession, name: str) -> Location | None:
    """Case-insensitive lookup by name."""
    result = await db.execute(select(Location).where(Location.name_key == location_key(name)))
    return result.scalar_one_or_none()


async def ensure_location(db: AsyncSession, name: str | None) -> Location | None:
    """Return the registry entry for ``name``, creating a custom one if it is unseen.

    Existing entries come back untouched, including inactive ones. The insert is
    committed on its own; if a concurrent writer created the same name first,
    the unique ``name_key`` index rejects ours and the winner is returned.
    """
    name = (name or "").strip()
    if not name:
        return None

    location = await find_location(db, name)
    if location is not None:
        return location

    location = Location(name=name, is_predefined=False, is_active=True, created_by=CREATED_BY_ADMIN)
    db.add(location)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await find_location(db, name)
        if existing is None:
            raise
        logger.info("Location %r was created concurrently, using existing entry", name)
        return existing

    logger.info("Added new custom location: %s", name)
    return location


async def add_predefined_location(db: AsyncSession, name: str) -> Location | None:
    """Create a predefined entry; returns None when the name is already registered."""
    if await find_location(db, name) is not None:
        return None

    location = Location(name=name, is_predefined=True, is_active=True, created_by=CREATED_BY_ADMIN)
    db.add(location)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        return None
    return location


async def reconcile_locations(db: AsyncSession, names: list[str] | None = None) -> tuple[int, int]:
    """Make every seed name a predefined, active, system entry.

    Existing entries are overwritten regardless of how they were created.
    Returns ``(created, updated)``.
    """
    created = updated = 0
    for name in PREDEFINED_LOCATIONS if names is None else names:
        location = await find_location(db, name)
        if location is None:
            db.add(Location(name=name, is_predefined=True, is_active=True, created_by=CREATED_BY_SYSTEM))
            created += 1
            logger.info("Seeded location: %s", name)
        else:
            location.is_predefined = True
            location.is_active = True
            location.created_by = CREATED_BY_SYSTEM
            updated += 1
        # Flush per name so a duplicate inside ``names`` is found by the next lookup
        await db.flush()

    await db.commit()
    return created, updated


async def list_active_locations(db: AsyncSession) -> list[Location]:
    result = await db.execute(
        select(Location)
        .where(Location.is_active == True)  # noqa: E712
        .order_by(Location.is_predefined.desc(), func.lower(Location.name))
    )
    return list(result.scalars().all())


async def list_predefined_locations(db: AsyncSession) -> list[Location]:
    result = await db.execute(
        select(Location)
        .where(Location.is_predefined == True, Location.is_active == True)  # noqa: E712
        .order_by(func.lower(Location.name))
    )
    return list(result.scalars().all())


async def list_distinct_locations(db: AsyncSession) -> list[str]:
    """Registry names plus locations in use by creators, case-insensitively unique."""
    registry = await db.execute(select(Location.name).where(Location.is_active == True))  # noqa: E712
    in_use = await db.execute(select(Creator.location).distinct().where(Creator.location != None))  # noqa: E711

    names: dict[str, str] = {}
    for name in list(registry.scalars().all()) + list(in_use.scalars().all()):
        if name and name.strip():
            # Registry rows come first, so their spelling wins
            names.setdefault(location_key(name), name.strip())

    return sorted(names.values(), key=str.lower)
