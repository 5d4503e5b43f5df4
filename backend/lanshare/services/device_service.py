import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lanshare.exceptions import NotFoundError, ValidationError
from lanshare.models.base import utcnow
from lanshare.models.device import Device
from lanshare.schemas.device import DeviceCreate, DeviceHandshake

logger = logging.getLogger(__name__)


async def list_devices(db: AsyncSession) -> list[Device]:
    result = await db.execute(select(Device).order_by(Device.id))
    return list(result.scalars().all())


async def get_device(db: AsyncSession, device_id: int) -> Device | None:
    return await db.get(Device, device_id)


async def require_device(db: AsyncSession, device_id: int | None, field: str) -> None:
    """Reject a reference to a device that does not exist. ``None`` is allowed."""
    if device_id is None:
        return
    if await get_device(db, device_id) is None:
        raise ValidationError(f"Unknown device {device_id}", field=field)


async def create_device(db: AsyncSession, data: DeviceCreate) -> Device:
    device = Device(
        name=data.name,
        type=data.type,
        ip_address=data.ip_address,
        is_connected=data.is_connected,
        last_seen=utcnow(),
    )
    db.add(device)
    await db.commit()
    await db.refresh(device)
    return device


async def set_device_connection(db: AsyncSession, device_id: int, is_connected: bool) -> Device:
    """Flip the connected flag and refresh last_seen."""
    device = await get_device(db, device_id)
    if device is None:
        raise NotFoundError(f"Device {device_id} not found")

    device.is_connected = is_connected
    device.last_seen = utcnow()
    await db.commit()
    await db.refresh(device)
    return device


async def connect_device(db: AsyncSession, handshake: DeviceHandshake) -> Device:
    """
    Register a device announcing itself over the live channel.

    A handshake naming an existing device refreshes that row instead of
    creating a duplicate.
    """
    device = None
    if handshake.device_id is not None:
        device = await get_device(db, handshake.device_id)
        if device is None:
            raise NotFoundError(f"Device {handshake.device_id} not found", field="deviceId")

    if device:
        device.name = handshake.name
        device.type = handshake.type
        device.ip_address = handshake.ip_address
    else:
        device = Device(
            name=handshake.name,
            type=handshake.type,
            ip_address=handshake.ip_address,
        )
        db.add(device)

    device.is_connected = True
    device.last_seen = utcnow()

    await db.commit()
    await db.refresh(device)
    return device


async def mark_all_disconnected(db: AsyncSession) -> int:
    """Clear connected flags left over from a previous run."""
    result = await db.execute(
        update(Device)
        .where(Device.is_connected.is_(True))
        .values(is_connected=False, last_seen=utcnow())
    )
    await db.commit()
    if result.rowcount:
        logger.info(f"Reset {result.rowcount} stale device connection(s)")
    return result.rowcount
