import asyncio

import anyio
import pytest
from starlette.websockets import WebSocketState

from lanshare.realtime.broadcaster import Broadcaster
from lanshare.schemas.events import ErrorEvent, ErrorPayload

pytestmark = pytest.mark.anyio


class FakeSocket:
    def __init__(self):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.sent: list[dict] = []
        self.closed_with: int | None = None

    async def send_json(self, data: dict) -> None:
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed_with = code
        self.client_state = WebSocketState.DISCONNECTED


class StalledSocket(FakeSocket):
    """A peer that stopped reading: sends never complete."""

    async def send_json(self, data: dict) -> None:
        await asyncio.Event().wait()


class BrokenSocket(FakeSocket):
    async def send_json(self, data: dict) -> None:
        raise RuntimeError("socket is gone")


def event(n: int) -> ErrorEvent:
    return ErrorEvent(data=ErrorPayload(detail=str(n)))


def details(socket: FakeSocket) -> list[str]:
    return [frame["data"]["detail"] for frame in socket.sent]


async def wait_for_frames(socket: FakeSocket, count: int) -> None:
    with anyio.fail_after(1):
        while len(socket.sent) < count:
            await asyncio.sleep(0)


async def test_stalled_connection_does_not_hold_back_others():
    broadcaster = Broadcaster(outbox_size=2)
    healthy, stalled = FakeSocket(), StalledSocket()
    broadcaster.add(healthy)
    broadcaster.add(stalled)

    queued = []
    for n in range(5):
        queued.append(broadcaster.broadcast(event(n)))
        await wait_for_frames(healthy, n + 1)

    assert details(healthy) == ["0", "1", "2", "3", "4"]
    assert queued[0] == 2
    # The stalled outbox is full by now, so only the healthy one accepts
    assert queued[-1] == 1

    await broadcaster.close_all()
    assert healthy.closed_with == 1001
    assert len(broadcaster) == 0


async def test_send_targets_one_connection_in_order():
    broadcaster = Broadcaster()
    first, second = FakeSocket(), FakeSocket()
    broadcaster.add(first)
    broadcaster.add(second)

    assert broadcaster.send(first, event(0))
    broadcaster.broadcast(event(1))
    await wait_for_frames(first, 2)
    await wait_for_frames(second, 1)

    assert details(first) == ["0", "1"]
    assert details(second) == ["1"]
    await broadcaster.close_all()


async def test_failed_send_only_affects_that_connection():
    broadcaster = Broadcaster()
    healthy, broken = FakeSocket(), BrokenSocket()
    broadcaster.add(healthy)
    broadcaster.add(broken)

    broadcaster.broadcast(event(0))
    broadcaster.broadcast(event(1))
    await wait_for_frames(healthy, 2)

    assert details(healthy) == ["0", "1"]
    await broadcaster.close_all()


async def test_removed_connection_gets_nothing():
    broadcaster = Broadcaster()
    socket = FakeSocket()
    broadcaster.add(socket)
    broadcaster.remove(socket)

    assert not broadcaster.send(socket, event(0))
    assert broadcaster.broadcast(event(1)) == 0
    assert len(broadcaster) == 0
    await asyncio.sleep(0)
