"""
Fan-out of live events to every open connection.

Each connection gets a bounded outbox drained by its own writer task, so
publishing never waits on a socket and a peer that stops reading only
loses its own events.
"""

import asyncio
import logging

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from lanshare.schemas.events import ServerEvent, encode_event

logger = logging.getLogger(__name__)

OUTBOX_SIZE = 256


class Broadcaster:
    """
    Set of open live connections owned by one server instance.

    Delivery is best effort: an event for a connection whose outbox is full
    is dropped for that connection. Each connection receives events in the
    order they were published.
    """

    def __init__(self, outbox_size: int = OUTBOX_SIZE):
        self.outbox_size = outbox_size
        self.outboxes: dict[WebSocket, asyncio.Queue[ServerEvent]] = {}
        self.writers: dict[WebSocket, asyncio.Task] = {}

    def add(self, websocket: WebSocket) -> None:
        outbox: asyncio.Queue[ServerEvent] = asyncio.Queue(maxsize=self.outbox_size)
        self.outboxes[websocket] = outbox
        self.writers[websocket] = asyncio.create_task(self._drain(websocket, outbox))

    def remove(self, websocket: WebSocket) -> None:
        self.outboxes.pop(websocket, None)
        writer = self.writers.pop(websocket, None)
        if writer is not None:
            writer.cancel()

    def __len__(self) -> int:
        return len(self.outboxes)

    @staticmethod
    def is_open(websocket: WebSocket) -> bool:
        return (
            websocket.client_state == WebSocketState.CONNECTED
            and websocket.application_state == WebSocketState.CONNECTED
        )

    def send(self, websocket: WebSocket, event: ServerEvent) -> bool:
        """Queue an event for one connection. Returns False if it was dropped."""
        outbox = self.outboxes.get(websocket)
        if outbox is None:
            return False
        try:
            outbox.put_nowait(event)
            return True
        except asyncio.QueueFull:
            logger.warning(f"Dropped {event.type} for a connection that is not keeping up")
            return False

    def broadcast(self, event: ServerEvent) -> int:
        """Queue an event for all connections. Returns how many accepted it."""
        queued = sum(self.send(websocket, event) for websocket in list(self.outboxes))
        logger.debug(f"Broadcast {event.type} to {queued}/{len(self.outboxes)} connection(s)")
        return queued

    async def _drain(self, websocket: WebSocket, outbox: asyncio.Queue[ServerEvent]) -> None:
        while True:
            event = await outbox.get()
            if not self.is_open(websocket):
                return
            try:
                await websocket.send_json(encode_event(event))
            except (RuntimeError, OSError, WebSocketDisconnect) as e:
                logger.warning(f"Dropped {event.type} for a connection: {e}")
                return

    async def close_all(self, code: int = 1001) -> None:
        writers = list(self.writers.values())
        for writer in writers:
            writer.cancel()
        await asyncio.gather(*writers, return_exceptions=True)

        for websocket in list(self.outboxes):
            if self.is_open(websocket):
                try:
                    await websocket.close(code=code)
                except (RuntimeError, OSError) as e:
                    logger.debug(f"Connection already gone at shutdown: {e}")
        self.outboxes.clear()
        self.writers.clear()
