from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from svc_teammate.api import build_router
from svc_teammate.config import settings
from svc_teammate.db import close_db_pool, ensure_schema, get_pool, init_db_pool
from svc_teammate.logging import configure_logging
from svc_teammate.middleware import RequestIdMiddleware
from svc_teammate.repos.analytics_repo import AnalyticsRepo
from svc_teammate.services.analytics_service import AnalyticsService
from svc_teammate.services.local_storage_service import GENERATED_SUBDIR
from svc_teammate.services.providers.registry import ProviderRegistry
from svc_teammate.workers.session_sweeper import sweep_forever

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        docs_url=os.getenv("DOCS_URL", "/docs"),
        redoc_url=os.getenv("REDOC_URL", "/redoc"),
        openapi_url=os.getenv("OPENAPI_URL", "/openapi.json"),
    )

    app.add_middleware(RequestIdMiddleware)
    app.include_router(build_router())

    # Locally stored provider images are served as /generated/<file>
    app.mount(
        f"/{GENERATED_SUBDIR}",
        StaticFiles(directory=str(Path(settings.PUBLIC_DIR) / GENERATED_SUBDIR), check_dir=False),
        name="generated",
    )

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request data", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def on_unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})

    @app.on_event("startup")
    async def on_startup():
        if settings.database_configured:
            pool = await init_db_pool(
                settings.DATABASE_URL,
                min_size=settings.DB_POOL_MIN,
                max_size=settings.DB_POOL_MAX,
                command_timeout=settings.DB_COMMAND_TIMEOUT,
            )
            if settings.DB_AUTO_CREATE_SCHEMA:
                await ensure_schema(pool)
        else:
            logger.warning("DATABASE_URL is not set; generation endpoints will report 503")

        app.state.providers = ProviderRegistry.build(settings)

        app.state.sweeper_task = None
        if settings.SESSION_SWEEPER_ENABLED and settings.database_configured:
            service = AnalyticsService(settings, AnalyticsRepo(get_pool()))
            app.state.sweeper_task = asyncio.create_task(
                sweep_forever(service, settings.SESSION_SWEEP_INTERVAL_SECONDS)
            )

    @app.on_event("shutdown")
    async def on_shutdown():
        task = getattr(app.state, "sweeper_task", None)
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        registry = getattr(app.state, "providers", None)
        if registry is not None:
            await registry.aclose()

        await close_db_pool()

    @app.get("/")
    async def root():
        return {"service": settings.SERVICE_NAME, "status": "ok"}

    return app


app = create_app()
