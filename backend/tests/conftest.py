from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from lanshare.config import Settings
from lanshare.main import create_app

MAX_UPLOAD_BYTES = 1024


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'lanshare.db'}",
        storage_path=str(tmp_path / "uploads"),
        max_upload_bytes=MAX_UPLOAD_BYTES,
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def content_area(settings) -> Path:
    return Path(settings.storage_path)


@pytest.fixture
def device(client) -> dict:
    response = client.post(
        "/api/devices",
        json={"name": "Phone", "type": "mobile", "ipAddress": "10.0.0.5"},
    )
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def upload(client):
    def _upload(content: bytes = b"0123456789", name: str = "a.txt", mime: str = "text/plain", **form):
        return client.post("/api/files/upload", files={"file": (name, content, mime)}, data=form)

    return _upload


@pytest.fixture
def uploaded_file(upload) -> dict:
    response = upload()
    assert response.status_code == 200
    return response.json()
