import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates

from app.core.database import Base

CREATED_BY_SYSTEM = "system"
CREATED_BY_ADMIN = "admin"


def location_key(name: str) -> str:
    return name.strip().lower()


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Lower-cased name; the unique index is what keeps the registry case-insensitively unique
    name_key: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_predefined: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_by: Mapped[str] = mapped_column(String(20), default=CREATED_BY_ADMIN)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @validates("name")
    def _validate_name(self, key, value):
        value = (value or "").strip()
        if not value:
            raise ValueError("Location name is required")
        self.name_key = location_key(value)
        return value

    @validates("created_by")
    def _validate_created_by(self, key, value):
        if value not in (CREATED_BY_SYSTEM, CREATED_BY_ADMIN):
            raise ValueError(f"'{value}' is not a valid location creator")
        return value
