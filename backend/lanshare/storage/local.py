import logging
from pathlib import Path
from typing import AsyncIterator

import aiofiles
import aiofiles.os

from lanshare.exceptions import StorageError
from lanshare.storage.base import CHUNK_SIZE, StorageBackend

logger = logging.getLogger(__name__)


class LocalStorageBackend(StorageBackend):
    def __init__(self, base_path: str):
        self.base_path = Path(base_path).resolve()
        if not self.base_path.exists():
            logger.info(f"Creating content area at {self.base_path}")
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, name: str) -> Path:
        full_path = (self.base_path / name).resolve()
        if full_path.parent != self.base_path:
            raise StorageError(f"Storage name escapes content area: {name!r}")
        return full_path

    async def write(self, name: str, data: bytes | AsyncIterator[bytes]) -> int:
        full_path = self._get_full_path(name)
        partial_path = full_path.with_name(full_path.name + ".part")
        written = 0

        try:
            async with aiofiles.open(partial_path, "wb") as f:
                if isinstance(data, bytes):
                    await f.write(data)
                    written = len(data)
                else:
                    async for chunk in data:
                        await f.write(chunk)
                        written += len(chunk)
            await aiofiles.os.replace(partial_path, full_path)
        except BaseException as e:
            await self._discard(partial_path)
            if isinstance(e, OSError):
                raise StorageError(f"Failed to write {name}: {e}") from e
            raise

        return written

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception(f"Could not remove partial file {path}")

    async def read_stream(self, name: str, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        full_path = self._get_full_path(name)
        async with aiofiles.open(full_path, "rb") as f:
            while chunk := await f.read(chunk_size):
                yield chunk

    async def delete(self, name: str) -> bool:
        full_path = self._get_full_path(name)
        try:
            await aiofiles.os.remove(full_path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {name}: {e}") from e

    async def exists(self, name: str) -> bool:
        full_path = self._get_full_path(name)
        return await aiofiles.os.path.isfile(full_path)
