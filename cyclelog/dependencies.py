"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from cyclelog.config import Settings, get_settings
from cyclelog.tracker.controller import CycleLogController


async def get_controller(request: Request) -> CycleLogController:
    """Return the session controller created by the app lifespan."""
    controller: CycleLogController | None = getattr(request.app.state, "controller", None)
    if controller is None:
        raise HTTPException(status_code=503, detail="Cycle log not loaded yet")
    return controller


# Annotated shortcuts for route signatures
Controller = Annotated[CycleLogController, Depends(get_controller)]
AppSettings = Annotated[Settings, Depends(get_settings)]
