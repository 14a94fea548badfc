import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import require_admin
from app.models.location import Location
from app.schemas.creator import MessageResponse
from app.schemas.location import LocationCreate, LocationOut, LocationUpdate
from app.services.locations import (
    add_predefined_location,
    ensure_location,
    find_location,
    list_active_locations,
    list_distinct_locations,
    list_predefined_locations,
)

router = APIRouter(prefix="/locations", tags=["Locations"])


def _required_name(body: LocationCreate) -> str:
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location name is required")
    return name


async def _get_location_or_404(db: AsyncSession, location_id: uuid.UUID) -> Location:
    result = await db.execute(select(Location).where(Location.id == location_id))
    location = result.scalar_one_or_none()
    if not location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return location


@router.get("", response_model=list[LocationOut], summary="Active locations", description="Active locations, predefined first, then by name.")
async def list_locations(db: AsyncSession = Depends(get_db)):
    return [LocationOut.from_model(loc) for loc in await list_active_locations(db)]


@router.get("/predefined", response_model=list[LocationOut], summary="Predefined locations")
async def predefined_locations(db: AsyncSession = Depends(get_db)):
    return [LocationOut.from_model(loc) for loc in await list_predefined_locations(db)]


@router.get("/distinct", response_model=list[str], summary="Distinct locations", description="Registry locations combined with locations in use by creators, for filtering.")
async def distinct_locations(db: AsyncSession = Depends(get_db)):
    return await list_distinct_locations(db)


@router.post("/predefined", response_model=LocationOut, status_code=status.HTTP_201_CREATED, summary="Add predefined location")
async def create_predefined(
    body: LocationCreate,
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    location = await add_predefined_location(db, _required_name(body))
    if location is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location already exists")
    return LocationOut.from_model(location)


@router.post("/custom", response_model=LocationOut, status_code=status.HTTP_201_CREATED, summary="Add custom location", description="Idempotent: if the name exists in any letter case, the existing entry is returned with status 200.")
async def create_custom(
    body: LocationCreate,
    response: Response,
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    name = _required_name(body)
    existing = await find_location(db, name)
    if existing is not None:
        response.status_code = status.HTTP_200_OK
        return LocationOut.from_model(existing)
    return LocationOut.from_model(await ensure_location(db, name))


@router.put("/predefined/{location_id}", response_model=LocationOut, summary="Update location")
async def update_predefined(
    location_id: uuid.UUID,
    body: LocationUpdate,
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    location = await _get_location_or_404(db, location_id)
    try:
        if body.name is not None:
            location.name = body.name
        if body.is_active is not None:
            location.is_active = body.is_active
        await db.commit()
    except ValueError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location already exists")
    return LocationOut.from_model(location)


@router.delete("/predefined/{location_id}", response_model=MessageResponse, summary="Deactivate location", description="Soft delete: the entry is kept with `isActive = false`.")
async def delete_predefined(
    location_id: uuid.UUID,
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    location = await _get_location_or_404(db, location_id)
    location.is_active = False
    await db.commit()
    return MessageResponse(message="Location deactivated successfully")
