"""Health check endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from cyclelog.dependencies import AppSettings

router = APIRouter(tags=["system"])
logger = logging.getLogger("cyclelog.health")


@router.get("/health")
async def health_check(request: Request, settings: AppSettings) -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also reports whether the cycle log was loaded and whether its data file
    exists yet.
    """
    loaded = getattr(request.app.state, "controller", None) is not None
    if not loaded:
        logger.warning("Health check: cycle log not loaded")

    return {
        "status": "healthy" if loaded else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "data_file": "present" if settings.data_file.exists() else "missing",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
