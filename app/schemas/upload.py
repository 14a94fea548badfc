from pydantic import BaseModel


class UploadResponse(BaseModel):
    url: str
    public_id: str
    size: int
    mime_type: str
