from datetime import datetime

from pydantic import Field, field_validator

from lanshare.models.device import DeviceType
from lanshare.schemas.base import CamelModel


class DeviceCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: DeviceType
    ip_address: str = Field(..., min_length=1, max_length=255)
    is_connected: bool = False

    @field_validator("name", "ip_address")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("type", mode="before")
    @classmethod
    def fallback_type(cls, value):
        if isinstance(value, DeviceType):
            return value
        if isinstance(value, str) and value.lower() in DeviceType._value2member_map_:
            return value.lower()
        return DeviceType.UNKNOWN


class DeviceHandshake(DeviceCreate):
    """Live-channel identification. ``device_id`` re-attaches to an existing device."""
    device_id: int | None = None


class DeviceResponse(CamelModel):
    id: int
    name: str
    type: DeviceType
    ip_address: str
    is_connected: bool
    last_seen: datetime
