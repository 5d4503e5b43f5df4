from datetime import datetime

from lanshare.schemas.base import CamelModel


class FileResponse(CamelModel):
    id: int
    filename: str
    original_name: str
    size: int
    mime_type: str
    uploaded_at: datetime
    uploaded_by: int | None


class DeleteResponse(CamelModel):
    success: bool = True
