import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.core.database import Database
from app.core.logging import setup_logging
from app.routers import api_router
from app.services.storage import create_storage

logger = logging.getLogger(__name__)

TAGS_METADATA = [
    {"name": "Auth", "description": "Admin login. Admin endpoints expect `Authorization: Bearer <token>`."},
    {"name": "Creators", "description": "Public browsing with search, filters and sorting; admin create, update and delete."},
    {"name": "CSV", "description": "Bulk import with per-row error reporting, template download and export."},
    {"name": "Locations", "description": "Location registry: predefined and custom locations, soft delete."},
    {"name": "Media", "description": "Images and videos attached to a creator."},
    {"name": "Upload", "description": "Avatar image upload and deletion."},
]

DESCRIPTION = """
# Creator Portal API

Admin-managed directory of content creators.

## CSV import

```
GET  /api/csv/template   → creators_template.csv
POST /api/csv/import     → {message, success, created, errors, data: {createdCreators, errors}}
```

Each row is saved on its own. Failed rows are reported as `Row <n>: <reason>`
(n counts data rows from 1, header excluded) so only those rows need fixing.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    database = Database(settings.DATABASE_URL)
    await database.connect()
    if settings.DB_CREATE_TABLES:
        await database.create_all()

    app.state.database = database
    app.state.storage = create_storage(settings)
    logger.info("%s %s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await database.close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=DESCRIPTION,
    openapi_tags=TAGS_METADATA,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_PREFIX)

app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/health", tags=["Health"])
async def health():
    """Liveness check."""
    return {"status": "ok"}
