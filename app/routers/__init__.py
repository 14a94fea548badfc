from fastapi import APIRouter

from app.routers import (
    auth,
    creators,
    csv_import,
    locations,
    media,
    upload,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(creators.router)
api_router.include_router(csv_import.router)
api_router.include_router(locations.router)
api_router.include_router(media.router)
api_router.include_router(upload.router)
