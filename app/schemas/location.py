from datetime import datetime

from pydantic import Field

from app.models.location import Location
from app.schemas.creator import CamelModel


class LocationCreate(CamelModel):
    name: str = Field(..., examples=["Mumbai"])


class LocationUpdate(CamelModel):
    name: str | None = None
    is_active: bool | None = None


class LocationOut(CamelModel):
    id: str
    name: str
    is_predefined: bool
    is_active: bool
    created_by: str
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, location: Location) -> "LocationOut":
        return cls(
            id=str(location.id),
            name=location.name,
            is_predefined=location.is_predefined,
            is_active=location.is_active,
            created_by=location.created_by,
            created_at=location.created_at,
        )
