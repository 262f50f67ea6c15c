"""Period and spotting commands."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from cyclelog.dependencies import Controller
from cyclelog.models.tracking import CommandResultRead, DayRequest, PeriodIntervalRead

router = APIRouter(tags=["periods"])


@router.get("/periods", response_model=list[PeriodIntervalRead])
def list_periods(controller: Controller) -> Any:
    return [
        {"start_date": p.start_date, "end_date": p.end_date, "is_ongoing": p.is_ongoing}
        for p in sorted(controller.store.periods, key=lambda p: p.start_date, reverse=True)
    ]


@router.post("/periods/start", response_model=CommandResultRead)
def start_period(controller: Controller, body: DayRequest) -> Any:
    return controller.start_period(body.date)


@router.post("/periods/end", response_model=CommandResultRead)
def end_period(controller: Controller, body: DayRequest) -> Any:
    return controller.end_period(body.date)


@router.post("/periods/clear", response_model=CommandResultRead)
def clear_period(controller: Controller, body: DayRequest) -> Any:
    return controller.clear_period(body.date)


@router.post("/spotting", response_model=CommandResultRead)
def log_spotting(controller: Controller, body: DayRequest) -> Any:
    return controller.log_spotting(body.date)
