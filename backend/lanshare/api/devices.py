from fastapi import APIRouter

from lanshare.api.deps import DbSession
from lanshare.exceptions import NotFoundError
from lanshare.schemas.device import DeviceCreate, DeviceResponse
from lanshare.services import device_service

router = APIRouter()


@router.get("", response_model=list[DeviceResponse])
async def list_devices(db: DbSession):
    """List all registered devices."""
    devices = await device_service.list_devices(db)
    return [DeviceResponse.model_validate(d) for d in devices]


@router.post("", response_model=DeviceResponse)
async def register_device(device_data: DeviceCreate, db: DbSession):
    """Register a device by hand."""
    device = await device_service.create_device(db, device_data)
    return DeviceResponse.model_validate(device)


@router.get("/{device_id}", response_model=DeviceResponse)
async def get_device(device_id: int, db: DbSession):
    device = await device_service.get_device(db, device_id)
    if device is None:
        raise NotFoundError("Device not found")
    return DeviceResponse.model_validate(device)
