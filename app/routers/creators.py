import math
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import require_admin
from app.models.creator import Creator
from app.schemas.creator import (
    CreatorCreate,
    CreatorListResponse,
    CreatorOut,
    CreatorUpdate,
    MessageResponse,
    PaginationMeta,
)
from app.services.creators import PERSISTENCE_ERRORS, create_creator, persistence_message, update_creator

router = APIRouter(prefix="/creators", tags=["Creators"])

ALL_GENRES = "All Creators"


def _creator_fields(data: dict) -> dict:
    """Flatten a (possibly partial) creator payload into model attributes."""
    details = data.pop("details", None)
    fields = dict(data)
    if details is not None:
        if "bio" in details:
            fields["bio"] = details["bio"]
        analytics = details.get("analytics") or {}
        for key in ("followers", "total_views", "average_views"):
            if key in analytics:
                fields[key] = analytics[key]
        if "reels" in details:
            fields["reels"] = details["reels"]
    return fields


def _bad_request(error: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=persistence_message(error))


async def get_creator_or_404(db: AsyncSession, creator_id: uuid.UUID) -> Creator:
    result = await db.execute(select(Creator).where(Creator.id == creator_id))
    creator = result.scalar_one_or_none()
    if not creator:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Creator not found")
    return creator


@router.get("", response_model=CreatorListResponse, summary="List creators", description="Search and filter creators. Filters: genre, platform, location, follower range. Sort: newest, followers, views, name.")
async def list_creators(
    q: str | None = None,
    genre: str | None = None,
    platform: str | None = None,
    location: str | None = None,
    min_followers: int | None = Query(None, ge=0),
    max_followers: int | None = Query(None, ge=0),
    sort: str = "newest",
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    query = select(Creator)

    if q:
        query = query.where(Creator.name.ilike(f"%{q}%"))
    if genre and genre != ALL_GENRES:
        query = query.where(Creator.genre == genre)
    if platform and platform != "All":
        query = query.where(Creator.platform == platform)
    if location and location != "All":
        query = query.where(func.lower(Creator.location) == location.strip().lower())
    if min_followers is not None:
        query = query.where(Creator.followers >= min_followers)
    if max_followers is not None:
        query = query.where(Creator.followers <= max_followers)

    # Count
    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0
    total_pages = math.ceil(total / per_page) if total > 0 else 0

    # Sort
    if sort == "followers":
        query = query.order_by(Creator.followers.desc())
    elif sort == "views":
        query = query.order_by(Creator.total_views.desc())
    elif sort == "name":
        query = query.order_by(func.lower(Creator.name))
    else:
        query = query.order_by(Creator.created_at.desc())

    query = query.offset((page - 1) * per_page).limit(per_page)
    result = await db.execute(query)

    return CreatorListResponse(
        data=[CreatorOut.from_model(c) for c in result.scalars().all()],
        meta=PaginationMeta(page=page, per_page=per_page, total=total, total_pages=total_pages),
    )


@router.get("/genres", response_model=list[str], summary="List genres", description="Distinct genres of all creators, sorted.")
async def list_genres(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Creator.genre).distinct())
    return sorted({g for g in result.scalars().all() if g}, key=str.lower)


@router.get("/{creator_id}", response_model=CreatorOut, summary="Creator detail")
async def get_creator(creator_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return CreatorOut.from_model(await get_creator_or_404(db, creator_id))


@router.post("", response_model=CreatorOut, status_code=status.HTTP_201_CREATED, summary="Create creator", description="Creates a creator. A location not yet in the registry is added as a custom location.")
async def create(
    body: CreatorCreate,
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await create_creator(db, _creator_fields(body.model_dump()))
    except PERSISTENCE_ERRORS as e:
        raise _bad_request(e)


@router.put("/{creator_id}", response_model=CreatorOut, summary="Update creator", description="Partial update. Media items are managed through `/media` and are left untouched.")
async def update(
    creator_id: uuid.UUID,
    body: CreatorUpdate,
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    creator = await get_creator_or_404(db, creator_id)
    try:
        return await update_creator(db, creator, _creator_fields(body.model_dump(exclude_unset=True)))
    except PERSISTENCE_ERRORS as e:
        raise _bad_request(e)


@router.delete("/{creator_id}", response_model=MessageResponse, summary="Delete creator")
async def delete(
    creator_id: uuid.UUID,
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    creator = await get_creator_or_404(db, creator_id)
    await db.delete(creator)
    await db.commit()
    return MessageResponse(message="Creator deleted successfully")
