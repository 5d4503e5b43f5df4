"""
Live channel at ``/ws``.

Clients identify as a device, send messages and report transfer progress;
the server pushes device, message and transfer events to every open
connection. A bad frame is answered with an ``error`` event and never
closes the connection.
"""

import logging

import anyio
from fastapi import APIRouter, WebSocket
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lanshare.exceptions import LanShareError
from lanshare.realtime import Broadcaster, ConnectionRegistry
from lanshare.schemas.events import (
    ConnectedEvent,
    DeviceConnect,
    ErrorEvent,
    ErrorPayload,
    NewMessageEvent,
    ReportTransferProgress,
    SendMessage,
    TransferUpdatedEvent,
    parse_client_message,
)
from lanshare.schemas.message import MessageResponse
from lanshare.schemas.transfer import TransferResponse
from lanshare.services import message_service, transfer_service

logger = logging.getLogger(__name__)
router = APIRouter()


async def _handle_frame(
    websocket: WebSocket,
    raw: str | bytes,
    registry: ConnectionRegistry,
    broadcaster: Broadcaster,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    message = parse_client_message(raw)

    if isinstance(message, DeviceConnect):
        await registry.identify(websocket, message.data)

    elif isinstance(message, SendMessage):
        data = message.data
        if data.from_device is None:
            # Unattributed messages come from whichever device this connection is
            data = data.model_copy(update={"from_device": registry.device_for(websocket)})
        async with session_factory() as db:
            created = await message_service.create_message(db, data)
        broadcaster.broadcast(NewMessageEvent(data=MessageResponse.model_validate(created)))

    elif isinstance(message, ReportTransferProgress):
        async with session_factory() as db:
            transfer = await transfer_service.update_transfer_progress(
                db, message.data.transfer_id, message.data.progress
            )
        broadcaster.broadcast(TransferUpdatedEvent(data=TransferResponse.model_validate(transfer)))


@router.websocket("/ws")
async def live_channel(websocket: WebSocket):
    state = websocket.app.state
    broadcaster: Broadcaster = state.broadcaster
    registry: ConnectionRegistry = state.registry

    await websocket.accept()
    broadcaster.add(websocket)
    client = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "unknown"
    logger.info(f"Live connection opened from {client} ({len(broadcaster)} open)")

    try:
        broadcaster.send(websocket, ConnectedEvent())

        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes", b"")

            try:
                await _handle_frame(websocket, raw, registry, broadcaster, state.session_factory)
            except LanShareError as e:
                logger.warning(f"Rejected live message from {client}: {e.detail}")
                broadcaster.send(websocket, ErrorEvent(data=ErrorPayload(**e.to_dict())))
            except Exception:
                logger.exception(f"Live message from {client} failed")
                broadcaster.send(websocket, ErrorEvent(data=ErrorPayload(detail="Internal error")))
    finally:
        broadcaster.remove(websocket)
        # The handler may already be cancelled; the close sequence must still run
        with anyio.CancelScope(shield=True):
            try:
                await registry.release(websocket)
            except Exception:
                logger.exception(f"Close sequence failed for {client}")
        logger.info(f"Live connection closed from {client} ({len(broadcaster)} open)")
