"""Bulk creator import from CSV.

The pipeline is: parse the upload into header-keyed rows, resolve each canonical
field from whichever header spelling the file uses, validate the required
fields, then persist valid rows one at a time. A row that fails validation or
persistence is reported as ``"Row <n>: <reason>"`` and never affects the other
rows; only an unreadable file aborts the whole import.
"""
import csv
import io
import logging
import re
from collections.abc import Mapping, Sequence

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.schemas.creator import CreatorOut
from app.services.creators import PERSISTENCE_ERRORS, create_creator, persistence_message
from app.services.locations import ensure_location
from app.services.storage import AVATAR_FOLDER, MediaStorage, StorageError, StoredFile

logger = logging.getLogger(__name__)

# Canonical field -> accepted header spellings. The first spelling is the one
# used in the downloadable template; new spellings can be appended freely.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "Name", "creator_name", "Creator Name"),
    "genre": ("genre", "Genre", "category", "Category"),
    "avatar": ("avatar", "Avatar", "avatar_url", "Avatar URL", "image", "imageUrl"),
    "platform": ("platform", "Platform"),
    "socialLink": ("socialLink", "social_link", "SocialLink", "Social Link"),
    "location": ("location", "Location", "city", "City"),
    "phoneNumber": ("phoneNumber", "phone_number", "PhoneNumber", "Phone Number", "contactNumber"),
    "mediaKit": ("mediaKit", "media_kit", "MediaKit", "Media Kit", "mediaKitUrl"),
    "bio": ("bio", "Bio", "description", "Description"),
    "followers": ("followers", "Followers", "followers_count", "Followers Count"),
    "totalViews": ("totalViews", "total_views", "TotalViews", "Total Views"),
    "averageViews": ("averageViews", "average_views", "AverageViews", "Average Views"),
}

TEMPLATE_HEADERS = list(FIELD_ALIASES)

TEMPLATE_ROWS = [
    [
        "John Doe", "Comedy", "https://example.com/avatar.jpg", "Instagram",
        "https://instagram.com/johndoe", "Mumbai", "+91-9876543210",
        "https://example.com/mediakit.pdf", "Comedian and content creator",
        "10000", "50000", "1000",
    ],
    [
        "Jane Smith", "Lifestyle", "https://example.com/avatar2.jpg", "YouTube",
        "https://youtube.com/@janesmith", "Delhi", "+91-9876543211",
        "", "Lifestyle and travel vlogger",
        "25000", "1000000", "40000",
    ],
]

DEFAULT_PLATFORM = "Instagram"
DEFAULT_GENRE = "Other"
DEFAULT_LOCATION = "Other"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class CSVParseError(Exception):
    """The upload is not readable as a CSV file with a header row."""


class NormalizedRow(BaseModel):
    name: str
    genre: str
    avatar: str
    platform: str
    social_link: str
    location: str
    phone_number: str
    media_kit: str
    bio: str
    followers: int
    total_views: int
    average_views: int
    reels: list[str] = []

    def creator_fields(self) -> dict:
        return {
            "name": self.name,
            "genre": self.genre,
            "avatar": self.avatar,
            "platform": self.platform,
            "social_link": self.social_link,
            "location": self.location,
            "phone_number": self.phone_number or None,
            "media_kit": self.media_kit or None,
            "bio": self.bio,
            "followers": self.followers,
            "total_views": self.total_views,
            "average_views": self.average_views,
            "reels": list(self.reels),
        }


class ImportSummary(BaseModel):
    created_records: list[CreatorOut] = []
    errors: list[str] = []

    @property
    def created(self) -> int:
        return len(self.created_records)

    @property
    def error_count(self) -> int:
        return len(self.errors)


def resolve(row: Mapping[str, str | None], candidate_keys: Sequence[str], fallback: str = "") -> str:
    for key in candidate_keys:
        value = row.get(key)
        if value is not None:
            return value
    return fallback


def parse_int(value: str) -> int:
    """Leading-integer parse; anything unparseable counts as 0."""
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else 0


def normalize_row(row: Mapping[str, str | None]) -> NormalizedRow:
    def field(name: str) -> str:
        return resolve(row, FIELD_ALIASES[name])

    return NormalizedRow(
        name=field("name"),
        genre=field("genre") or DEFAULT_GENRE,
        avatar=field("avatar") or settings.DEFAULT_AVATAR_URL,
        platform=field("platform") or DEFAULT_PLATFORM,
        social_link=field("socialLink"),
        location=field("location") or DEFAULT_LOCATION,
        phone_number=field("phoneNumber"),
        media_kit=field("mediaKit"),
        bio=field("bio"),
        followers=parse_int(field("followers")),
        total_views=parse_int(field("totalViews")),
        average_views=parse_int(field("averageViews")),
        reels=[],
    )


def validate_row(row: NormalizedRow, row_index: int) -> str | None:
    """Return the failure reason for the first missing required field, or None."""
    if not row.name.strip():
        return f"Row {row_index}: Name is required"
    if not row.social_link.strip():
        return f"Row {row_index}: Social link is required"
    return None


def parse_csv(raw: bytes) -> list[dict[str, str | None]]:
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CSVParseError("CSV file must be UTF-8 encoded") from e

    reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
    try:
        if not reader.fieldnames:
            raise CSVParseError("CSV file has no header row")
        return list(reader)
    except csv.Error as e:
        raise CSVParseError(f"Malformed CSV at line {reader.line_num}: {e}") from e


async def _rehost_avatar(storage: MediaStorage, row: NormalizedRow) -> StoredFile | None:
    """Copy a row's remote avatar into media storage; keep the original URL on failure."""
    avatar = row.avatar.strip()
    if avatar == settings.DEFAULT_AVATAR_URL or not avatar.lower().startswith("http") or storage.hosts(avatar):
        return None
    try:
        stored = await storage.upload_from_url(avatar, AVATAR_FOLDER)
    except StorageError as e:
        logger.warning("Keeping original avatar URL %s: %s", avatar, e)
        return None
    row.avatar = stored.url
    return stored


async def import_rows(db: AsyncSession, raw: bytes, storage: MediaStorage | None = None) -> ImportSummary:
    """Import every row of ``raw``.

    With ``storage`` given, remote avatar URLs are copied into it first.
    """
    rows = parse_csv(raw)
    logger.info("Processing CSV import with %d rows", len(rows))

    summary = ImportSummary()
    for row_index, raw_row in enumerate(rows, start=1):
        row = normalize_row(raw_row)

        reason = validate_row(row, row_index)
        if reason is not None:
            logger.info("Skipping invalid row: %s", reason)
            summary.errors.append(reason)
            continue

        rehosted = await _rehost_avatar(storage, row) if storage is not None else None
        try:
            created = await create_creator(db, row.creator_fields(), register_location=False)
        except PERSISTENCE_ERRORS as e:
            reason = f"Row {row_index}: {persistence_message(e)}"
            logger.info("Row rejected on save: %s", reason)
            summary.errors.append(reason)
            if rehosted is not None:
                await storage.destroy(rehosted.public_id)
            continue

        if created.location.strip().lower() != DEFAULT_LOCATION.lower():
            await ensure_location(db, created.location)
        summary.created_records.append(created)

    logger.info("CSV import completed: %d created, %d failed", summary.created, summary.error_count)
    return summary


def generate_template() -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(TEMPLATE_HEADERS)
    writer.writerows(TEMPLATE_ROWS)
    return buffer.getvalue()
