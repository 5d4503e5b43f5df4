"""
Association between live connections and the device each one identified as.
"""

import logging

from fastapi import WebSocket
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lanshare.exceptions import NotFoundError
from lanshare.models.device import Device
from lanshare.realtime.broadcaster import Broadcaster
from lanshare.schemas.device import DeviceHandshake, DeviceResponse
from lanshare.schemas.events import DeviceConnectedEvent, DeviceDisconnectedEvent
from lanshare.services import device_service

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """
    Tracks at most one device per connection.

    unidentified --identify--> identified(device) --release--> terminated

    Re-identifying connects the new device, then disconnects the previous one.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        broadcaster: Broadcaster,
    ):
        self.session_factory = session_factory
        self.broadcaster = broadcaster
        self.devices: dict[WebSocket, int] = {}

    def device_for(self, websocket: WebSocket) -> int | None:
        return self.devices.get(websocket)

    async def identify(self, websocket: WebSocket, handshake: DeviceHandshake) -> Device:
        # A rejected handshake leaves the current association untouched
        async with self.session_factory() as db:
            device = await device_service.connect_device(db, handshake)

        previous = self.devices.get(websocket)
        self.devices[websocket] = device.id
        if previous is not None and previous != device.id:
            await self._disconnect(previous)

        logger.info(f"Connection identified as device {device.id} ({device.name})")
        self.broadcaster.broadcast(
            DeviceConnectedEvent(data=DeviceResponse.model_validate(device))
        )
        return device

    async def release(self, websocket: WebSocket) -> int | None:
        """Run the close sequence for a connection. Returns the released device id."""
        device_id = self.devices.pop(websocket, None)
        if device_id is not None:
            await self._disconnect(device_id)
        return device_id

    async def _disconnect(self, device_id: int) -> None:
        try:
            async with self.session_factory() as db:
                device = await device_service.set_device_connection(db, device_id, False)
        except NotFoundError:
            logger.warning(f"Device {device_id} vanished before it could be disconnected")
            return

        logger.info(f"Device {device_id} disconnected")
        self.broadcaster.broadcast(
            DeviceDisconnectedEvent(data=DeviceResponse.model_validate(device))
        )
