import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import healthlog.models  # noqa: F401 register all models with Base.metadata
from healthlog.api.routes.device import router as device_router
from healthlog.api.routes.health_logs import router as health_logs_router
from healthlog.config import get_settings
from healthlog.database import Base, device_engine, engine
from healthlog.errors import StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Create the primary schema on startup; the device store is never touched
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()
    if device_engine is not None:
        await device_engine.dispose()


async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Primary store unavailable"})


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="HealthLog",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.include_router(health_logs_router)
    app.include_router(device_router)
    app.add_exception_handler(StoreError, store_error_handler)

    @app.get("/api/system/status")
    async def system_status() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
