from lanshare.models.base import Base
from lanshare.models.device import Device, DeviceType
from lanshare.models.file import File
from lanshare.models.transfer import ACTIVE_STATUSES, Transfer, TransferStatus
from lanshare.models.message import Message

__all__ = [
    "Base",
    "Device",
    "DeviceType",
    "File",
    "Transfer",
    "TransferStatus",
    "ACTIVE_STATUSES",
    "Message",
]
