from pydantic import BaseModel

from app.schemas.creator import CamelModel, CreatorOut


class ImportData(CamelModel):
    created_creators: list[CreatorOut]
    errors: list[str]


class ImportResponse(BaseModel):
    message: str
    success: bool
    created: int
    errors: int
    data: ImportData
