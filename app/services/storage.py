"""Media storage collaborators.

Two backends share one interface: Cloudinary (through its SDK) for production
and the local filesystem for development and tests. ``destroy`` never raises
for provider-side problems; it returns a ``DeleteResult`` so callers can keep
their own state authoritative and just log the outcome.
"""
import io
import logging
import mimetypes
import os
import uuid
from dataclasses import dataclass
from urllib.parse import urlparse

import aiofiles
import aiofiles.os
import cloudinary.uploader
import httpx
from cloudinary.exceptions import Error as CloudinaryError
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings

logger = logging.getLogger(__name__)

DELETED = "deleted"
NOT_FOUND = "not_found"
ERROR = "error"

AVATAR_FOLDER = "creator-avatars"
MEDIA_FOLDER = "creator-media"

AVATAR_TRANSFORMATION = [
    {"width": 400, "height": 400, "crop": "fill", "gravity": "auto"},
    {"quality": "auto", "fetch_format": "auto"},
]


class StorageError(Exception):
    """Raised when an upload cannot be stored."""


@dataclass
class StoredFile:
    url: str
    public_id: str
    resource_type: str = "image"


@dataclass
class DeleteResult:
    status: str
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == DELETED


class MediaStorage:
    async def upload(self, data: bytes, filename: str, content_type: str, folder: str) -> StoredFile:
        raise NotImplementedError

    async def upload_from_url(self, url: str, folder: str) -> StoredFile:
        """Copy a remote image into this storage. Raises ``StorageError`` on failure."""
        raise NotImplementedError

    def hosts(self, url: str) -> bool:
        """Whether ``url`` already points into this storage."""
        return False

    async def destroy(self, public_id: str, resource_type: str = "image") -> DeleteResult:
        raise NotImplementedError


def _resource_type(content_type: str) -> str:
    if content_type.startswith("video/"):
        return "video"
    if content_type.startswith("image/"):
        return "image"
    return "raw"


class CloudinaryStorage(MediaStorage):
    """Cloudinary backend. The SDK is blocking, so calls run in the threadpool."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        self.cloud_name = cloud_name
        self.credentials = {"cloud_name": cloud_name, "api_key": api_key, "api_secret": api_secret}

    def hosts(self, url: str) -> bool:
        parsed = urlparse(url)
        return parsed.netloc == "res.cloudinary.com" and parsed.path.startswith(f"/{self.cloud_name}/")

    async def _upload(self, file, fallback_type: str, **options) -> StoredFile:
        try:
            result = await run_in_threadpool(cloudinary.uploader.upload, file, **options, **self.credentials)
        except (CloudinaryError, OSError) as e:
            raise StorageError(f"Cloudinary upload failed: {e}") from e

        if "secure_url" not in result:
            raise StorageError(f"Cloudinary upload failed: {result.get('error', result)}")
        return StoredFile(
            url=result["secure_url"],
            public_id=result["public_id"],
            resource_type=result.get("resource_type", fallback_type),
        )

    async def upload(self, data: bytes, filename: str, content_type: str, folder: str) -> StoredFile:
        return await self._upload(
            io.BytesIO(data), _resource_type(content_type), folder=folder, resource_type="auto", filename=filename
        )

    async def upload_from_url(self, url: str, folder: str) -> StoredFile:
        return await self._upload(url, "image", folder=folder, transformation=AVATAR_TRANSFORMATION)

    async def destroy(self, public_id: str, resource_type: str = "image") -> DeleteResult:
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.destroy,
                public_id,
                resource_type=resource_type,
                invalidate=True,
                **self.credentials,
            )
        except (CloudinaryError, OSError) as e:
            return DeleteResult(ERROR, str(e))

        outcome = result.get("result")
        if outcome == "ok":
            return DeleteResult(DELETED)
        if outcome == "not found":
            return DeleteResult(NOT_FOUND)
        return DeleteResult(ERROR, str(outcome))


class LocalStorage(MediaStorage):
    """Stores files under ``root``; they are served by the app at ``/uploads``."""

    def __init__(
        self,
        root: str,
        url_prefix: str = "/uploads",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.root = root
        self.url_prefix = url_prefix.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def hosts(self, url: str) -> bool:
        return url.startswith(f"{self.url_prefix}/")

    async def upload(self, data: bytes, filename: str, content_type: str, folder: str) -> StoredFile:
        ext = os.path.splitext(filename or "file")[1].lower()
        stem = uuid.uuid4().hex
        upload_dir = os.path.join(self.root, folder)
        os.makedirs(upload_dir, exist_ok=True)

        filepath = os.path.join(upload_dir, f"{stem}{ext}")
        try:
            async with aiofiles.open(filepath, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise StorageError(f"Could not write {filepath}: {e}") from e

        return StoredFile(
            url=f"{self.url_prefix}/{folder}/{stem}{ext}",
            public_id=f"{folder}/{stem}",
            resource_type=_resource_type(content_type),
        )

    async def upload_from_url(self, url: str, folder: str) -> StoredFile:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport, follow_redirects=True
            ) as client:
                resp = await client.get(url)
        except httpx.HTTPError as e:
            raise StorageError(f"Could not fetch {url}: {e}") from e

        content_type = resp.headers.get("content-type", "").split(";")[0].strip()
        if resp.status_code != 200 or not content_type.startswith("image/"):
            raise StorageError(f"Could not fetch {url}: HTTP {resp.status_code} ({content_type or 'no content type'})")

        filename = os.path.basename(urlparse(url).path)
        if not os.path.splitext(filename)[1]:
            filename += mimetypes.guess_extension(content_type) or ""
        return await self.upload(resp.content, filename, content_type, folder)

    async def destroy(self, public_id: str, resource_type: str = "image") -> DeleteResult:
        folder, _, stem = public_id.rpartition("/")
        if not stem or ".." in public_id.split("/"):
            return DeleteResult(NOT_FOUND)

        directory = os.path.join(self.root, folder)
        if not os.path.isdir(directory):
            return DeleteResult(NOT_FOUND)

        matches = [f for f in os.listdir(directory) if os.path.splitext(f)[0] == stem]
        if not matches:
            return DeleteResult(NOT_FOUND)
        try:
            for match in matches:
                await aiofiles.os.remove(os.path.join(directory, match))
        except OSError as e:
            return DeleteResult(ERROR, str(e))
        return DeleteResult(DELETED)


def create_storage(settings: Settings) -> MediaStorage:
    if settings.STORAGE_BACKEND == "cloudinary":
        logger.info("Using Cloudinary storage (cloud %s)", settings.CLOUDINARY_CLOUD_NAME)
        return CloudinaryStorage(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
        )
    if settings.STORAGE_BACKEND == "local":
        logger.info("Using local storage under %s", settings.UPLOAD_DIR)
        return LocalStorage(settings.UPLOAD_DIR)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
