from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lanshare.exceptions import NotFoundError, ValidationError
from lanshare.models.base import utcnow
from lanshare.models.file import File
from lanshare.models.transfer import ACTIVE_STATUSES, Transfer, TransferStatus
from lanshare.schemas.transfer import TransferCreate
from lanshare.services.device_service import require_device


def _apply_status(transfer: Transfer, status: TransferStatus) -> None:
    # completed_at is set only while the transfer is completed
    if status != TransferStatus.COMPLETED:
        transfer.completed_at = None
    elif transfer.status != TransferStatus.COMPLETED or transfer.completed_at is None:
        transfer.completed_at = utcnow()
    transfer.status = status


def _apply_progress(transfer: Transfer, progress: int) -> None:
    if not 0 <= progress <= 100:
        raise ValidationError("Progress must be between 0 and 100", field="progress")

    transfer.progress = progress
    if progress == 100:
        _apply_status(transfer, TransferStatus.COMPLETED)


async def list_transfers(db: AsyncSession, newest_first: bool = False) -> list[Transfer]:
    order = Transfer.id.desc() if newest_first else Transfer.id
    result = await db.execute(select(Transfer).order_by(order))
    return list(result.scalars().all())


async def list_active_transfers(db: AsyncSession) -> list[Transfer]:
    """Transfers still pending or in flight."""
    result = await db.execute(
        select(Transfer)
        .where(Transfer.status.in_(ACTIVE_STATUSES))
        .order_by(Transfer.id)
    )
    return list(result.scalars().all())


async def get_transfer(db: AsyncSession, transfer_id: int) -> Transfer | None:
    return await db.get(Transfer, transfer_id)


async def _require_transfer(db: AsyncSession, transfer_id: int) -> Transfer:
    transfer = await get_transfer(db, transfer_id)
    if transfer is None:
        raise NotFoundError(f"Transfer {transfer_id} not found")
    return transfer


async def create_transfer(db: AsyncSession, data: TransferCreate) -> Transfer:
    if await db.get(File, data.file_id) is None:
        raise ValidationError(f"Unknown file {data.file_id}", field="fileId")
    await require_device(db, data.from_device, "fromDevice")
    await require_device(db, data.to_device, "toDevice")

    transfer = Transfer(
        file_id=data.file_id,
        from_device=data.from_device,
        to_device=data.to_device,
        started_at=utcnow(),
    )
    _apply_status(transfer, data.status)
    _apply_progress(transfer, data.progress)

    db.add(transfer)
    await db.commit()
    await db.refresh(transfer)
    return transfer


async def update_transfer_progress(db: AsyncSession, transfer_id: int, progress: int) -> Transfer:
    """Record progress. Reaching 100 completes the transfer whatever its prior status."""
    transfer = await _require_transfer(db, transfer_id)
    _apply_progress(transfer, progress)
    await db.commit()
    await db.refresh(transfer)
    return transfer


async def update_transfer_status(db: AsyncSession, transfer_id: int, status: TransferStatus) -> Transfer:
    transfer = await _require_transfer(db, transfer_id)
    _apply_status(transfer, status)
    await db.commit()
    await db.refresh(transfer)
    return transfer
