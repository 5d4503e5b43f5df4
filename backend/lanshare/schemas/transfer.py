from datetime import datetime

from pydantic import Field

from lanshare.models.transfer import TransferStatus
from lanshare.schemas.base import CamelModel


class TransferCreate(CamelModel):
    file_id: int
    from_device: int | None = None
    to_device: int | None = None
    status: TransferStatus = TransferStatus.PENDING
    progress: int = Field(0, ge=0, le=100)


class TransferResponse(CamelModel):
    id: int
    file_id: int | None
    from_device: int | None
    to_device: int | None
    status: TransferStatus
    progress: int
    started_at: datetime
    completed_at: datetime | None


class TransferProgress(CamelModel):
    progress: int = Field(..., ge=0, le=100)


class TransferProgressUpdate(TransferProgress):
    transfer_id: int


class TransferStatusUpdate(CamelModel):
    status: TransferStatus
