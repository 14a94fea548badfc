import logging
from datetime import date

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import get_storage, require_admin
from app.models.creator import Creator
from app.schemas.csv_import import ImportData, ImportResponse
from app.services.csv_export import export_creators
from app.services.csv_import import CSVParseError, generate_template, import_rows
from app.services.storage import MediaStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/csv", tags=["CSV"])

CSV_MIME_TYPE = "text/csv"


def _csv_attachment(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=CSV_MIME_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post(
    "/import",
    response_model=ImportResponse,
    summary="Import creators from CSV",
    description="Multipart field `csvFile` (`text/csv` or `.csv`, max 5MB). Each row is validated and saved on its own; failed rows are listed as `Row <n>: <reason>` in file order.",
)
async def import_csv(
    csv_file: UploadFile = File(..., alias="csvFile"),
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
):
    filename = csv_file.filename or ""
    if csv_file.content_type != CSV_MIME_TYPE and not filename.lower().endswith(".csv"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only CSV files are allowed")

    if csv_file.size and csv_file.size > settings.MAX_CSV_SIZE:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="CSV file is too large (max 5MB)")

    content = await csv_file.read()
    if len(content) > settings.MAX_CSV_SIZE:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="CSV file is too large (max 5MB)")

    logger.info("Processing CSV file: %s (%d bytes)", filename, len(content))
    try:
        summary = await import_rows(db, content, storage)
    except CSVParseError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ImportResponse(
        message=f"Imported {summary.created} creators, {summary.error_count} failed",
        success=summary.error_count == 0,
        created=summary.created,
        errors=summary.error_count,
        data=ImportData(created_creators=summary.created_records, errors=summary.errors),
    )


@router.get("/template", summary="Download CSV template", description="Header row plus two example rows.")
async def download_template(_admin: str = Depends(require_admin)):
    return _csv_attachment(generate_template(), "creators_template.csv")


@router.get("/export", summary="Export creators as CSV")
async def export_csv(
    _admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Creator).order_by(Creator.created_at))
    content = export_creators(result.scalars().all())
    return _csv_attachment(content, f"creators_export_{date.today().isoformat()}.csv")
