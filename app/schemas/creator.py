from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from app.models.creator import MAX_COUNTER, Creator, CreatorMedia


class CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class Analytics(CamelModel):
    followers: int = Field(0, ge=0, le=MAX_COUNTER)
    total_views: int = Field(0, ge=0, le=MAX_COUNTER)
    average_views: int | None = Field(None, ge=0, le=MAX_COUNTER)


class MediaItem(CamelModel):
    id: str
    type: str
    url: str
    thumbnail: str
    caption: str = ""
    created_at: datetime

    @classmethod
    def from_model(cls, media: CreatorMedia) -> "MediaItem":
        return cls(
            id=media.media_id,
            type=media.type,
            url=media.url,
            thumbnail=media.thumbnail,
            caption=media.caption or "",
            created_at=media.created_at,
        )


class CreatorDetailsIn(CamelModel):
    bio: str = ""
    analytics: Analytics = Field(default_factory=Analytics)
    reels: list[str] = []


class CreatorDetails(CreatorDetailsIn):
    media: list[MediaItem] = []


class CreatorCreate(CamelModel):
    name: str
    genre: str
    platform: str
    social_link: str
    avatar: str | None = None
    location: str | None = None
    phone_number: str | None = None
    media_kit: str | None = None
    details: CreatorDetailsIn = Field(default_factory=CreatorDetailsIn)


class CreatorUpdate(CamelModel):
    name: str | None = None
    genre: str | None = None
    platform: str | None = None
    social_link: str | None = None
    avatar: str | None = None
    location: str | None = None
    phone_number: str | None = None
    media_kit: str | None = None
    details: CreatorDetailsIn | None = None


class CreatorOut(CamelModel):
    id: str
    name: str
    genre: str
    avatar: str | None = None
    cloudinary_public_id: str | None = None
    platform: str
    social_link: str
    location: str
    phone_number: str | None = None
    media_kit: str | None = None
    details: CreatorDetails
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, creator: Creator) -> "CreatorOut":
        return cls(
            id=str(creator.id),
            name=creator.name,
            genre=creator.genre,
            avatar=creator.avatar,
            cloudinary_public_id=creator.cloudinary_public_id,
            platform=creator.platform,
            social_link=creator.social_link,
            location=creator.location,
            phone_number=creator.phone_number,
            media_kit=creator.media_kit,
            details=CreatorDetails(
                bio=creator.bio or "",
                analytics=Analytics(
                    followers=creator.followers,
                    total_views=creator.total_views,
                    average_views=creator.average_views,
                ),
                reels=list(creator.reels or []),
                media=[MediaItem.from_model(m) for m in creator.media],
            ),
            created_at=creator.created_at,
            updated_at=creator.updated_at,
        )


class PaginationMeta(BaseModel):
    page: int
    per_page: int
    total: int
    total_pages: int


class CreatorListResponse(BaseModel):
    data: list[CreatorOut]
    meta: PaginationMeta


class MessageResponse(BaseModel):
    message: str
