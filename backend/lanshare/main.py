import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lanshare import __version__
from lanshare.api import live
from lanshare.api.router import api_router
from lanshare.config import Settings, get_settings
from lanshare.database import create_engine, create_session_factory
from lanshare.exceptions import LanShareError, StorageError, field_from_errors
from lanshare.models import Base
from lanshare.realtime import Broadcaster, ConnectionRegistry
from lanshare.services import device_service
from lanshare.storage import create_storage

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Own the per-instance state: database engine, content area and the
    live connection registry. Torn down when the server stops.
    """
    settings: Settings = app.state.settings

    engine = create_engine(settings)
    if settings.auto_create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    session_factory = create_session_factory(engine)
    async with session_factory() as db:
        await device_service.mark_all_disconnected(db)

    broadcaster = Broadcaster()
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.storage = create_storage(settings)
    app.state.broadcaster = broadcaster
    app.state.registry = ConnectionRegistry(session_factory, broadcaster)
    logger.info(f"{settings.app_name} {__version__} started ({settings.storage_type} storage)")

    try:
        yield
    finally:
        await broadcaster.close_all()
        await engine.dispose()
        logger.info(f"{settings.app_name} stopped")


async def lanshare_error_handler(request: Request, exc: LanShareError) -> JSONResponse:
    if isinstance(exc, StorageError):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    field = field_from_errors(errors)
    detail = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"detail": f"Invalid {field}: {detail}" if field else detail, "field": field},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Local network file sharing, messaging and live device presence",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    app.add_exception_handler(LanShareError, lanshare_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(api_router, prefix="/api")
    app.include_router(live.router)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run("lanshare.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
