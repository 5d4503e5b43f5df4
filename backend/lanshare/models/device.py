"""
Device model for peers on the local network.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from lanshare.models.base import Base, IntegerIDMixin, UTCDateTime, utcnow


class DeviceType(str, Enum):
    """Kinds of devices a client can announce itself as."""
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"
    LAPTOP = "laptop"
    UNKNOWN = "unknown"  # Fallback for anything else


class Device(Base, IntegerIDMixin):
    """
    Registered device.

    Devices are never deleted; a closing live connection only flips
    ``is_connected`` and refreshes ``last_seen``.
    """
    __tablename__ = "devices"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[DeviceType] = mapped_column(
        SQLEnum(
            DeviceType,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    ip_address: Mapped[str] = mapped_column(String(255), nullable=False)

    # Connection state
    is_connected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_seen: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Device {self.id} {self.name} ({self.type})>"
