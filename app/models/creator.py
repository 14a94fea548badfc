import re
import uuid
from datetime import datetime, timezone
from urllib.parse import urlparse

from sqlalchemy import JSON, BigInteger, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.core.database import Base

PLATFORMS = ("Instagram", "YouTube", "TikTok", "Twitter", "Other")
MEDIA_TYPES = ("image", "video")
DEFAULT_LOCATION = "Other"
# Largest value a BIGINT counter column holds
MAX_COUNTER = 2**63 - 1

URL_RE = re.compile(r"^https?://.+", re.IGNORECASE)


def derive_public_id(avatar: str | None) -> str | None:
    """`.../upload/v17/creator-avatars/abc.jpg` -> `creator-avatars/abc`."""
    if not avatar:
        return None
    segments = [s for s in urlparse(avatar).path.split("/") if s]
    if len(segments) < 2:
        return None
    folder, filename = segments[-2], segments[-1]
    stem = filename.rsplit(".", 1)[0] if "." in filename else filename
    return f"{folder}/{stem}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Creator(Base):
    __tablename__ = "creators"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    genre: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    avatar: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    cloudinary_public_id: Mapped[str | None] = mapped_column(String(500), nullable=True)
    platform: Mapped[str] = mapped_column(String(20), nullable=False)
    social_link: Mapped[str] = mapped_column(String(1000), nullable=False)
    location: Mapped[str] = mapped_column(String(255), default=DEFAULT_LOCATION, index=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    media_kit: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    bio: Mapped[str] = mapped_column(Text, default="")
    followers: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_views: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    average_views: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    reels: Mapped[list[str]] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    media: Mapped[list["CreatorMedia"]] = relationship(
        back_populates="creator",
        cascade="all, delete-orphan",
        order_by="CreatorMedia.created_at",
        lazy="selectin",
    )

    @validates("name", "genre")
    def _validate_required_text(self, key, value):
        value = (value or "").strip()
        if not value:
            raise ValueError(f"{key} is required")
        return value

    @validates("platform")
    def _validate_platform(self, key, value):
        value = (value or "").strip()
        if value not in PLATFORMS:
            raise ValueError(f"'{value}' is not a valid platform (expected one of: {', '.join(PLATFORMS)})")
        return value

    @validates("social_link")
    def _validate_social_link(self, key, value):
        value = (value or "").strip()
        if not URL_RE.match(value):
            raise ValueError("socialLink must be a valid URL")
        return value

    @validates("media_kit")
    def _validate_media_kit(self, key, value):
        value = (value or "").strip()
        if value and not URL_RE.match(value):
            raise ValueError("mediaKit must be a valid URL")
        return value or None

    @validates("avatar")
    def _validate_avatar(self, key, value):
        value = (value or "").strip() or None
        self.cloudinary_public_id = derive_public_id(value)
        return value

    @validates("location")
    def _validate_location(self, key, value):
        return (value or "").strip() or DEFAULT_LOCATION

    @validates("followers", "total_views", "average_views")
    def _validate_counter(self, key, value):
        if value is None and key == "average_views":
            return None
        if value is None or value < 0:
            raise ValueError(f"{key} must be a non-negative integer")
        if value > MAX_COUNTER:
            raise ValueError(f"{key} is too large (max {MAX_COUNTER})")
        return value

    @validates("reels")
    def _validate_reels(self, key, value):
        return [r.strip() for r in (value or []) if r and r.strip()]


class CreatorMedia(Base):
    __tablename__ = "creator_media"
    __table_args__ = (UniqueConstraint("creator_id", "media_id", name="uq_creator_media_id"),)

    pk: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    creator_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("creators.id", ondelete="CASCADE"), nullable=False)
    media_id: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(1000), nullable=False)
    caption: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    creator: Mapped["Creator"] = relationship(back_populates="media")

    @validates("type")
    def _validate_type(self, key, value):
        if value not in MEDIA_TYPES:
            raise ValueError(f"'{value}' is not a valid media type")
        return value
