import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.core.config import settings
from app.core.deps import get_storage, require_admin
from app.schemas.creator import MessageResponse
from app.schemas.upload import UploadResponse
from app.services.storage import AVATAR_FOLDER, DELETED, NOT_FOUND, MediaStorage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post("/image", response_model=UploadResponse, status_code=status.HTTP_201_CREATED, summary="Upload avatar image", description="Multipart `image` (image/* only, max 5MB). Returns the stored URL and its public id.")
async def upload_image(
    image: UploadFile = File(...),
    _admin: str = Depends(require_admin),
    storage: MediaStorage = Depends(get_storage),
):
    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files are allowed")

    if image.size and image.size > settings.MAX_IMAGE_SIZE:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Image is too large (max 5MB)")

    content = await image.read()
    if len(content) > settings.MAX_IMAGE_SIZE:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Image is too large (max 5MB)")

    try:
        stored = await storage.upload(content, image.filename or "image.jpg", content_type, AVATAR_FOLDER)
    except StorageError as e:
        logger.error("Avatar upload failed: %s", e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to upload image")

    logger.info("Uploaded avatar %s", stored.public_id)
    return UploadResponse(
        url=stored.url,
        public_id=stored.public_id,
        size=len(content),
        mime_type=content_type,
    )


@router.delete("/image/{public_id:path}", response_model=MessageResponse, summary="Delete avatar image")
async def delete_image(
    public_id: str,
    _admin: str = Depends(require_admin),
    storage: MediaStorage = Depends(get_storage),
):
    result = await storage.destroy(public_id)
    if result.status == DELETED:
        return MessageResponse(message="Image deleted successfully")
    if result.status == NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")

    logger.warning("Storage delete for image %s failed: %s", public_id, result.detail)
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to delete image")
