from fastapi import APIRouter

from lanshare.api import devices, files, health, messages, transfers

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(devices.router, prefix="/devices", tags=["devices"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
api_router.include_router(transfers.router, prefix="/transfers", tags=["transfers"])
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
