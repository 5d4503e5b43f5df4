"""
File lifecycle: upload, download and delete.

Bytes live in the content area under a generated name; the metadata row is
only created once the bytes are fully persisted, and is only removed
together with them.
"""

import logging
import mimetypes
import os
from typing import AsyncIterator
from urllib.parse import quote
from uuid import uuid4

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lanshare.exceptions import NotFoundError, PayloadTooLargeError, StorageError
from lanshare.models.base import utcnow
from lanshare.models.file import File
from lanshare.services.device_service import require_device
from lanshare.storage import StorageBackend
from lanshare.storage.base import CHUNK_SIZE

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def generate_storage_name() -> str:
    """Collision-free, filesystem-safe name, unrelated to the uploaded name."""
    return uuid4().hex


def resolve_mime_type(declared: str | None, filename: str | None) -> str:
    # Advisory only, never used to reject an upload
    if declared:
        return declared
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or DEFAULT_MIME_TYPE


def content_disposition(filename: str) -> str:
    """Attachment header naming the original file."""
    quoted = filename.replace("\\", "\\\\").replace('"', '\\"')
    try:
        quoted.encode("latin-1")
    except UnicodeEncodeError:
        fallback = quoted.encode("ascii", "replace").decode("ascii")
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
    return f'attachment; filename="{quoted}"'


def _upload_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


async def _iter_upload(upload: UploadFile, max_bytes: int) -> AsyncIterator[bytes]:
    received = 0
    while chunk := await upload.read(CHUNK_SIZE):
        received += len(chunk)
        if received > max_bytes:
            raise PayloadTooLargeError(f"File exceeds the {max_bytes} byte limit", field="file")
        yield chunk


async def list_files(db: AsyncSession, newest_first: bool = False) -> list[File]:
    order = File.id.desc() if newest_first else File.id
    result = await db.execute(select(File).order_by(order))
    return list(result.scalars().all())


async def get_file(db: AsyncSession, file_id: int) -> File | None:
    return await db.get(File, file_id)


async def _require_file(db: AsyncSession, file_id: int) -> File:
    file = await get_file(db, file_id)
    if file is None:
        raise NotFoundError(f"File {file_id} not found")
    return file


async def store_upload(
    db: AsyncSession,
    storage: StorageBackend,
    upload: UploadFile,
    max_bytes: int,
    uploaded_by: int | None = None,
) -> File:
    """Persist the uploaded bytes, then record the metadata row."""
    size = _upload_size(upload)
    if size > max_bytes:
        raise PayloadTooLargeError(f"File exceeds the {max_bytes} byte limit", field="file")

    await require_device(db, uploaded_by, "deviceId")

    original_name = upload.filename or "upload"
    storage_name = generate_storage_name()

    await upload.seek(0)
    written = await storage.write(storage_name, _iter_upload(upload, max_bytes))

    file = File(
        filename=storage_name,
        original_name=original_name,
        size=written,
        mime_type=resolve_mime_type(upload.content_type, upload.filename),
        uploaded_at=utcnow(),
        uploaded_by=uploaded_by,
    )
    db.add(file)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        # No metadata row, so the bytes would be orphaned
        try:
            await storage.delete(storage_name)
        except StorageError:
            logger.exception(f"Could not discard orphaned bytes at {storage_name}")
        raise
    await db.refresh(file)

    logger.info(f"Stored upload {file.id} '{original_name}' ({written} bytes) as {storage_name}")
    return file


async def open_download(
    db: AsyncSession,
    storage: StorageBackend,
    file_id: int,
) -> tuple[File, AsyncIterator[bytes]]:
    """Resolve a file for download, failing with NotFoundError on drift."""
    file = await _require_file(db, file_id)

    if not await storage.exists(file.filename):
        logger.warning(f"File {file.id} has metadata but no bytes at {file.filename}")
        raise NotFoundError(f"File {file_id} content is missing")

    return file, storage.read_stream(file.filename)


async def delete_file(db: AsyncSession, storage: StorageBackend, file_id: int) -> None:
    """
    Remove the metadata row and the bytes together.

    The row delete is flushed first and only committed once the bytes are
    gone; a storage failure rolls it back. Bytes that are already missing
    are logged and the row is still removed.
    """
    file = await _require_file(db, file_id)

    await db.delete(file)
    await db.flush()

    try:
        removed = await storage.delete(file.filename)
    except StorageError:
        await db.rollback()
        logger.exception(f"Could not delete bytes for file {file_id}; keeping metadata")
        raise

    if not removed:
        logger.warning(f"File {file_id} bytes were already missing at {file.filename}")

    await db.commit()
    logger.info(f"Deleted file {file_id} '{file.original_name}'")
