import csv
import io
from collections.abc import Iterable

from app.models.creator import Creator


def _timestamp(value) -> str:
    return value.isoformat() if value else ""


# Header -> value; the headers are also accepted as aliases by the importer
EXPORT_COLUMNS = [
    ("Name", lambda c: c.name),
    ("Genre", lambda c: c.genre),
    ("Platform", lambda c: c.platform),
    ("Social Link", lambda c: c.social_link),
    ("Location", lambda c: c.location or ""),
    ("Phone Number", lambda c: c.phone_number or ""),
    ("Media Kit", lambda c: c.media_kit or ""),
    ("Bio", lambda c: c.bio or ""),
    ("Followers", lambda c: c.followers or 0),
    ("Total Views", lambda c: c.total_views or 0),
    ("Average Views", lambda c: c.average_views or 0),
    ("Avatar URL", lambda c: c.avatar or ""),
    ("Created At", lambda c: _timestamp(c.created_at)),
    ("Updated At", lambda c: _timestamp(c.updated_at)),
]


def export_creators(creators: Iterable[Creator]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([header for header, _ in EXPORT_COLUMNS])
    for creator in creators:
        writer.writerow([getter(creator) for _, getter in EXPORT_COLUMNS])
    return buffer.getvalue()
