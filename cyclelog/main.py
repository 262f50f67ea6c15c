"""Cycle Log API: FastAPI application entry point.

Run locally:
    uvicorn cyclelog.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cyclelog.config import Settings, get_settings
from cyclelog.middleware.private_data import PrivateDataHeadersMiddleware
from cyclelog.routers import backup, calendar_view, days, health, periods
from cyclelog.services.storage import StorageError, get_storage
from cyclelog.tracker.config_loader import get_cycle_config, load_cycle_config
from cyclelog.tracker.controller import CycleLogController
from cyclelog.tracker.store import CycleLogStore

# ---------- Logging ----------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("cyclelog")


def build_controller(settings: Settings) -> CycleLogController:
    """Hydrate the session's store from disk and wrap it in a controller."""
    config = (
        load_cycle_config(settings.cycle_config_path)
        if settings.cycle_config_path
        else get_cycle_config()
    )
    storage = get_storage(settings)
    store = CycleLogStore.from_persisted(storage.load())
    logger.info(
        "Loaded cycle log from %s: %d period(s)", settings.data_file, len(store.periods)
    )
    return CycleLogController(store, storage, config)


# ---------- App factory ----------

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.getLogger("cyclelog").setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup / shutdown hooks."""
        logger.info(
            "Starting %s v%s [%s]",
            settings.app_name,
            settings.app_version,
            settings.environment,
        )
        app.state.controller = build_controller(settings)
        yield
        app.state.controller = None
        logger.info("%s shut down", settings.app_name)

    app = FastAPI(
        title="Cycle Log API",
        description=(
            "Personal menstrual cycle log: periods, spotting, basal temperature, "
            "symptoms and notes, with cycle length statistics and forecasts."
        ),
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    # ---------- Middleware (outermost first) ----------

    app.add_middleware(PrivateDataHeadersMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Persisting cycle log failed: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Could not save the cycle log"})

    # ---------- Health check (outside v1 prefix) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(calendar_view.router, prefix=v1_prefix)
    app.include_router(periods.router, prefix=v1_prefix)
    app.include_router(days.router, prefix=v1_prefix)
    app.include_router(backup.router, prefix=v1_prefix)

    return app


app = create_app()
