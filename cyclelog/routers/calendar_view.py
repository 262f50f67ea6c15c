"""Month calendar and cycle forecast endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Path

from cyclelog.dependencies import Controller
from cyclelog.models.tracking import CalendarViewRead, PredictionSummaryRead

router = APIRouter(tags=["calendar"])


@router.get("/calendar", response_model=CalendarViewRead)
def visible_month(controller: Controller) -> Any:
    return controller.view()


@router.get("/calendar/{year}/{month}", response_model=CalendarViewRead)
def show_month(
    controller: Controller,
    year: int = Path(ge=1, le=9999),
    month: int = Path(ge=1, le=12),
) -> Any:
    return controller.show_month(year, month)


@router.post("/calendar/previous", response_model=CalendarViewRead)
def previous_month(controller: Controller) -> Any:
    try:
        return controller.show_previous_month()
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/calendar/next", response_model=CalendarViewRead)
def next_month(controller: Controller) -> Any:
    try:
        return controller.show_next_month()
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/predictions", response_model=PredictionSummaryRead)
def predictions(controller: Controller) -> Any:
    prediction = controller.prediction()
    return {
        "next_period_date": prediction.next_period_date,
        "ovulation_date": prediction.ovulation_date,
        "fertile_window": prediction.fertile_window,
        "average_cycle_length": controller.average_cycle_length(),
    }
