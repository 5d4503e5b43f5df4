from abc import ABC, abstractmethod
from typing import AsyncIterator

CHUNK_SIZE = 64 * 1024


class StorageBackend(ABC):
    """Content area holding one opaque blob per stored file name."""

    @abstractmethod
    async def write(self, name: str, data: bytes | AsyncIterator[bytes]) -> int:
        """Write data under ``name`` and return the number of bytes written.

        Nothing is left behind under ``name`` if the write fails.
        """
        pass

    @abstractmethod
    async def read_stream(self, name: str, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Stream data from storage in chunks."""
        pass

    @abstractmethod
    async def delete(self, name: str) -> bool:
        """Delete a blob. Returns False if it was already missing."""
        pass

    @abstractmethod
    async def exists(self, name: str) -> bool:
        """Check if a blob exists in storage."""
        pass
