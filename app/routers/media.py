import logging
import os
import time
import uuid

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import get_storage, require_admin
from app.models.creator import CreatorMedia
from app.routers.creators import get_creator_or_404
from app.schemas.creator import MediaItem, MessageResponse
from app.services.storage import MEDIA_FOLDER, MediaStorage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/media", tags=["Media"])

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".mp4", ".mov", ".avi"}


def media_type_for(content_type: str | None, url: str) -> str:
    if content_type and content_type.startswith("video/"):
        return "video"
    if "/video/upload/" in url:
        return "video"
    return "image"


def thumbnail_for(media_type: str, url: str) -> str:
    if media_type != "video":
        return url
    base, ext = os.path.splitext(url)
    return f"{base}.jpg" if ext else url


@router.get("/{creator_id}", response_model=list[MediaItem], summary="Creator media")
async def list_media(creator_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    creator = await get_creator_or_404(db, creator_id)
    return [MediaItem.from_model(m) for m in creator.media]


@router.post("/{creator_id}", response_model=MediaItem, status_code=status.HTTP_201_CREATED, summary="Add media", description="Multipart `media` (image or video) with optional `caption`.")
async def add_media(
    creator_id: uuid.UUID,
    media: UploadFile = File(...),
    caption: str = Form(""),
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
):
    content_type = media.content_type or ""
    ext = os.path.splitext(media.filename or "")[1].lower()
    if not content_type.startswith(("image/", "video/")) or ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image and video files are allowed")

    content = await media.read()
    if len(content) > settings.MAX_MEDIA_SIZE:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Media file is too large")

    creator = await get_creator_or_404(db, creator_id)

    try:
        stored = await storage.upload(content, media.filename or f"media{ext}", content_type, MEDIA_FOLDER)
    except StorageError as e:
        logger.error("Media upload for creator %s failed: %s", creator_id, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to upload media")

    media_type = media_type_for(content_type, stored.url)
    item = CreatorMedia(
        media_id=stored.public_id or f"media_{int(time.time() * 1000)}",
        type=media_type,
        url=stored.url,
        thumbnail=thumbnail_for(media_type, stored.url),
        caption=caption,
    )
    creator.media.append(item)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Media with this id already exists")

    logger.info("Added %s %s to creator %s", media_type, item.media_id, creator_id)
    return MediaItem.from_model(item)


@router.delete("/{creator_id}/{media_id:path}", response_model=MessageResponse, summary="Remove media", description="Removes the item from the creator, then asks storage to delete the file. A storage failure is logged and does not fail the request.")
async def delete_media(
    creator_id: uuid.UUID,
    media_id: str,
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
):
    creator = await get_creator_or_404(db, creator_id)
    item = next((m for m in creator.media if m.media_id == media_id), None)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Media not found")

    resource_type = item.type
    creator.media.remove(item)
    await db.commit()

    result = await storage.destroy(media_id, resource_type=resource_type)
    if result.ok:
        logger.info("Deleted media %s from storage", media_id)
    else:
        logger.warning("Storage delete for media %s returned %s: %s", media_id, result.status, result.detail)

    return MessageResponse(message="Media deleted successfully")
