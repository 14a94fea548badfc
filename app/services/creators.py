import logging

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.creator import Creator
from app.schemas.creator import CreatorOut
from app.services.locations import ensure_location

logger = logging.getLogger(__name__)

# Failures that reject a single creator write: model validation (ValueError),
# values the driver cannot bind (OverflowError) and database errors.
PERSISTENCE_ERRORS = (ValueError, OverflowError, SQLAlchemyError)


def persistence_message(error: Exception) -> str:
    if isinstance(error, DBAPIError):
        return str(error.orig)
    return str(error)


async def create_creator(db: AsyncSession, fields: dict, register_location: bool = True) -> CreatorOut:
    """Persist a new creator and register its location.

    Model validation problems surface as ``ValueError`` before anything is
    written. Anything the database rejects is rolled back and re-raised, so the
    session stays usable for the next write.
    """
    creator = Creator(**fields, media=[])
    db.add(creator)
    try:
        await db.commit()
    except PERSISTENCE_ERRORS:
        await db.rollback()
        raise

    created = CreatorOut.from_model(creator)
    logger.info("Created creator %s (%s)", created.name, created.id)
    if register_location:
        await ensure_location(db, created.location)
    return created


async def update_creator(db: AsyncSession, creator: Creator, changes: dict) -> CreatorOut:
    try:
        for key, value in changes.items():
            setattr(creator, key, value)
        await db.commit()
    except PERSISTENCE_ERRORS:
        await db.rollback()
        raise

    updated = CreatorOut.from_model(creator)
    if "location" in changes:
        await ensure_location(db, updated.location)
    return updated
