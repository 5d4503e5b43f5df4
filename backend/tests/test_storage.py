from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from lanshare.config import Settings
from lanshare.exceptions import PayloadTooLargeError, StorageError
from lanshare.storage import create_storage
from lanshare.storage.local import LocalStorageBackend
from lanshare.storage.s3 import S3StorageBackend

pytestmark = pytest.mark.anyio


async def chunks(*parts: bytes):
    for part in parts:
        yield part


async def failing_chunks():
    yield b"partial"
    raise PayloadTooLargeError("too big")


async def collect(stream) -> bytes:
    return b"".join([chunk async for chunk in stream])


@pytest.fixture
def local(tmp_path) -> LocalStorageBackend:
    return LocalStorageBackend(str(tmp_path / "content"))


async def test_local_write_and_read(local):
    assert await local.write("blob", chunks(b"abc", b"def")) == 6

    assert await local.exists("blob")
    assert await collect(local.read_stream("blob", chunk_size=4)) == b"abcdef"


async def test_local_write_bytes(local):
    assert await local.write("blob", b"xyz") == 3
    assert await collect(local.read_stream("blob")) == b"xyz"


async def test_local_failed_write_leaves_nothing(local):
    with pytest.raises(PayloadTooLargeError):
        await local.write("blob", failing_chunks())

    assert not await local.exists("blob")
    assert list(local.base_path.iterdir()) == []


async def test_local_delete(local):
    await local.write("blob", b"x")

    assert await local.delete("blob") is True
    assert await local.delete("blob") is False
    assert not await local.exists("blob")


async def test_local_rejects_names_outside_content_area(local):
    with pytest.raises(StorageError):
        await local.write("../escape", b"x")


def missing_error(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, operation)


@pytest.fixture
def s3_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def s3(s3_client) -> S3StorageBackend:
    return S3StorageBackend(bucket="lanshare", client=s3_client)


async def test_s3_write_uploads_spooled_body(s3, s3_client):
    uploaded = {}

    def upload_fileobj(body, bucket, key):
        uploaded[(bucket, key)] = body.read()

    s3_client.upload_fileobj.side_effect = upload_fileobj

    assert await s3.write("blob", chunks(b"ab", b"cd")) == 4
    assert uploaded == {("lanshare", "blob"): b"abcd"}


async def test_s3_write_failure_is_storage_error(s3, s3_client):
    s3_client.upload_fileobj.side_effect = ClientError({"Error": {"Code": "500"}}, "PutObject")

    with pytest.raises(StorageError):
        await s3.write("blob", b"x")


async def test_s3_read_stream(s3, s3_client):
    body = MagicMock()
    body.iter_chunks.return_value = iter([b"ab", b"cd"])
    s3_client.get_object.return_value = {"Body": body}

    assert await collect(s3.read_stream("blob")) == b"abcd"
    s3_client.get_object.assert_called_once_with(Bucket="lanshare", Key="blob")
    body.close.assert_called_once()


async def test_s3_exists(s3, s3_client):
    s3_client.head_object.return_value = {"ContentLength": 12}

    assert await s3.exists("blob")

    s3_client.head_object.side_effect = missing_error("HeadObject")
    assert not await s3.exists("blob")


async def test_s3_delete_missing_key(s3, s3_client):
    s3_client.head_object.side_effect = missing_error("HeadObject")

    assert await s3.delete("blob") is False
    s3_client.delete_object.assert_not_called()


async def test_s3_delete(s3, s3_client):
    s3_client.head_object.return_value = {"ContentLength": 1}

    assert await s3.delete("blob") is True
    s3_client.delete_object.assert_called_once_with(Bucket="lanshare", Key="blob")


def test_factory_defaults_to_local(tmp_path):
    storage = create_storage(Settings(_env_file=None, storage_path=str(tmp_path / "c")))

    assert isinstance(storage, LocalStorageBackend)


def test_factory_requires_s3_credentials(tmp_path):
    with pytest.raises(ValueError):
        create_storage(Settings(_env_file=None, storage_type="s3", s3_bucket="lanshare"))
