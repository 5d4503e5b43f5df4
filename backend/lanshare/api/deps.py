from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lanshare.config import Settings
from lanshare.database import get_db
from lanshare.realtime import Broadcaster
from lanshare.storage import StorageBackend


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> StorageBackend:
    return request.app.state.storage


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Storage = Annotated[StorageBackend, Depends(get_storage)]
LiveBroadcaster = Annotated[Broadcaster, Depends(get_broadcaster)]
