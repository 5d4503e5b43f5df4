from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import StreamingResponse

from lanshare.api.deps import AppSettings, DbSession, Storage
from lanshare.exceptions import NotFoundError, ValidationError
from lanshare.schemas.file import DeleteResponse, FileResponse
from lanshare.services import file_service

router = APIRouter()


def _parse_device_id(raw: str | None) -> int | None:
    # Browsers send FormData fields as strings, possibly empty
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("deviceId must be an integer", field="deviceId")


@router.post("/upload", response_model=FileResponse)
async def upload_file(
    db: DbSession,
    storage: Storage,
    settings: AppSettings,
    file: Annotated[UploadFile | None, File()] = None,
    device_id: Annotated[str | None, Form(alias="deviceId")] = None,
):
    """Upload a single file."""
    if file is None:
        raise ValidationError("No file uploaded", field="file")

    try:
        stored = await file_service.store_upload(
            db=db,
            storage=storage,
            upload=file,
            max_bytes=settings.max_upload_bytes,
            uploaded_by=_parse_device_id(device_id),
        )
    finally:
        await file.close()

    return FileResponse.model_validate(stored)


@router.get("", response_model=list[FileResponse])
async def list_files(db: DbSession):
    """List all files, newest first."""
    files = await file_service.list_files(db, newest_first=True)
    return [FileResponse.model_validate(f) for f in files]


@router.get("/{file_id}", response_model=FileResponse)
async def get_file(file_id: int, db: DbSession):
    file = await file_service.get_file(db, file_id)
    if file is None:
        raise NotFoundError("File not found")
    return FileResponse.model_validate(file)


@router.get("/{file_id}/download")
async def download_file(file_id: int, db: DbSession, storage: Storage):
    """Stream the file back under its original name."""
    file, stream = await file_service.open_download(db, storage, file_id)

    return StreamingResponse(
        stream,
        media_type=file.mime_type,
        headers={
            "Content-Disposition": file_service.content_disposition(file.original_name),
            "Content-Length": str(file.size),
        },
    )


@router.delete("/{file_id}", response_model=DeleteResponse)
async def delete_file(file_id: int, db: DbSession, storage: Storage):
    """Delete the file's metadata and bytes."""
    await file_service.delete_file(db, storage, file_id)
    return DeleteResponse(success=True)
