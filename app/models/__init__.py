from app.models.creator import Creator, CreatorMedia
from app.models.location import Location

__all__ = [
    "Creator",
    "CreatorMedia",
    "Location",
]
