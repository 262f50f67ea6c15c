"""Backup export and import."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, Response
from starlette.concurrency import run_in_threadpool

from cyclelog.dependencies import Controller
from cyclelog.models.tracking import CommandResultRead
from cyclelog.tracker.store import ImportParseError

router = APIRouter(prefix="/backup", tags=["backup"])
logger = logging.getLogger("cyclelog.backup")


@router.get("/export")
def export_backup(controller: Controller) -> Response:
    saved: dict[str, bytes] = {}

    def save(filename: str, payload: bytes) -> None:
        saved[filename] = payload

    filename = controller.export_backup(save)
    return Response(
        content=saved[filename],
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=CommandResultRead)
async def import_backup(
    request: Request,
    controller: Controller,
    confirm: bool = Query(default=False, description="Overwrite all existing data"),
) -> Any:
    """Replace the whole log with an uploaded backup file.

    The raw file content is the request body.  Without ``confirm=true`` the
    file is only checked and nothing is overwritten.
    """
    raw = await request.body()
    try:
        return await run_in_threadpool(
            controller.import_backup, raw, confirm=lambda: confirm
        )
    except ImportParseError as exc:
        raise HTTPException(
            status_code=422,
            detail={"error": "import_parse_error", "message": str(exc)},
        ) from exc
