from lanshare.storage.base import StorageBackend
from lanshare.storage.factory import create_storage

__all__ = ["StorageBackend", "create_storage"]
