"""Per-day log entries: temperature, symptoms, notes, share text, chart."""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException

from cyclelog.dependencies import Controller
from cyclelog.models.tracking import (
    CommandResultRead,
    DayEntryRead,
    DayEntryUpdate,
    ShareTextRead,
    TemperaturePointRead,
)
from cyclelog.tracker.controller import InvalidEntryError
from cyclelog.tracker.dates import to_date_string

router = APIRouter(tags=["days"])


@router.get("/days/{day}", response_model=DayEntryRead)
def get_day(day: date, controller: Controller) -> Any:
    return controller.day_entry(to_date_string(day))


@router.put("/days/{day}", response_model=CommandResultRead)
def save_day(day: date, controller: Controller, body: DayEntryUpdate) -> Any:
    try:
        return controller.save_day(
            to_date_string(day),
            temperature=body.temperature,
            symptoms=[s.value for s in body.symptoms],
            note=body.note,
        )
    except InvalidEntryError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/days/{day}/share", response_model=ShareTextRead)
def share_day(day: date, controller: Controller) -> Any:
    day_str = to_date_string(day)
    return {"date": day_str, "text": controller.share_text(day_str)}


@router.get("/temperatures/chart", response_model=list[TemperaturePointRead])
def temperature_chart(controller: Controller) -> Any:
    return controller.temperature_chart()
