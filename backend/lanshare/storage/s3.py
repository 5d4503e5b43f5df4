import logging
import tempfile
from typing import AsyncIterator

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import iterate_in_threadpool, run_in_threadpool

from lanshare.exceptions import StorageError
from lanshare.storage.base import CHUNK_SIZE, StorageBackend

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


def _is_missing(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _MISSING_CODES


class S3StorageBackend(StorageBackend):
    """S3-compatible content area. boto3 is blocking, so every call runs in the threadpool."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        region: str = "us-east-1",
        client=None,
    ):
        self.bucket = bucket
        self.endpoint_url = endpoint_url

        if client is None:
            config = Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            )
            client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
                config=config,
            )
        self.client = client

    async def write(self, name: str, data: bytes | AsyncIterator[bytes]) -> int:
        # Spool to a temp file so upload_fileobj gets a seekable body
        with tempfile.SpooledTemporaryFile(max_size=8 * 1024 * 1024) as body:
            if isinstance(data, bytes):
                body.write(data)
            else:
                async for chunk in data:
                    body.write(chunk)
            written = body.tell()
            body.seek(0)

            try:
                await run_in_threadpool(self.client.upload_fileobj, body, self.bucket, name)
            except (BotoCoreError, ClientError) as e:
                raise StorageError(f"Failed to upload {name}: {e}") from e

        return written

    async def read_stream(self, name: str, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        response = await run_in_threadpool(self.client.get_object, Bucket=self.bucket, Key=name)
        body = response["Body"]
        try:
            async for chunk in iterate_in_threadpool(body.iter_chunks(chunk_size=chunk_size)):
                yield chunk
        finally:
            body.close()

    async def delete(self, name: str) -> bool:
        # delete_object succeeds for missing keys, so look first
        if not await self.exists(name):
            return False
        try:
            await run_in_threadpool(self.client.delete_object, Bucket=self.bucket, Key=name)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to delete {name}: {e}") from e
        return True

    async def exists(self, name: str) -> bool:
        try:
            await run_in_threadpool(self.client.head_object, Bucket=self.bucket, Key=name)
            return True
        except ClientError as e:
            if _is_missing(e):
                return False
            raise StorageError(f"Failed to stat {name}: {e}") from e
