from fastapi import APIRouter

from lanshare.api.deps import DbSession, LiveBroadcaster
from lanshare.exceptions import NotFoundError
from lanshare.schemas.events import TransferUpdatedEvent
from lanshare.schemas.transfer import (
    TransferCreate,
    TransferProgress,
    TransferResponse,
    TransferStatusUpdate,
)
from lanshare.services import transfer_service

router = APIRouter()


@router.get("", response_model=list[TransferResponse])
async def list_transfers(db: DbSession):
    """List all transfers, newest first."""
    transfers = await transfer_service.list_transfers(db, newest_first=True)
    return [TransferResponse.model_validate(t) for t in transfers]


@router.get("/active", response_model=list[TransferResponse])
async def list_active_transfers(db: DbSession):
    """List pending and in-flight transfers."""
    transfers = await transfer_service.list_active_transfers(db)
    return [TransferResponse.model_validate(t) for t in transfers]


@router.post("", response_model=TransferResponse)
async def create_transfer(transfer_data: TransferCreate, db: DbSession):
    transfer = await transfer_service.create_transfer(db, transfer_data)
    return TransferResponse.model_validate(transfer)


@router.get("/{transfer_id}", response_model=TransferResponse)
async def get_transfer(transfer_id: int, db: DbSession):
    transfer = await transfer_service.get_transfer(db, transfer_id)
    if transfer is None:
        raise NotFoundError("Transfer not found")
    return TransferResponse.model_validate(transfer)


@router.patch("/{transfer_id}", response_model=TransferResponse)
async def update_transfer_status(
    transfer_id: int,
    update: TransferStatusUpdate,
    db: DbSession,
    broadcaster: LiveBroadcaster,
):
    """Set a transfer's status and notify live clients."""
    transfer = await transfer_service.update_transfer_status(db, transfer_id, update.status)
    response = TransferResponse.model_validate(transfer)
    broadcaster.broadcast(TransferUpdatedEvent(data=response))
    return response


@router.post("/{transfer_id}/progress", response_model=TransferResponse)
async def update_transfer_progress(
    transfer_id: int,
    update: TransferProgress,
    db: DbSession,
    broadcaster: LiveBroadcaster,
):
    """Record progress; 100 completes the transfer."""
    transfer = await transfer_service.update_transfer_progress(db, transfer_id, update.progress)
    response = TransferResponse.model_validate(transfer)
    broadcaster.broadcast(TransferUpdatedEvent(data=response))
    return response
