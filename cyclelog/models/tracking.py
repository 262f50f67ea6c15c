"""Pydantic request/response models for the cycle log API."""

from __future__ import annotations

from pydantic import ConfigDict, Field

from cyclelog.models.base import CycleLogBase, DateString
from cyclelog.models.snapshot import SymptomCode


# ---------- Requests ----------

class DayRequest(CycleLogBase):
    """Body for commands that act on one day."""

    date: DateString


class DayEntryUpdate(CycleLogBase):
    """Day editor save.  Empty fields delete what was logged before."""

    model_config = ConfigDict(allow_inf_nan=False)

    temperature: float | None = Field(default=None, description="Basal temperature in °C")
    symptoms: list[SymptomCode] = Field(default_factory=list)
    note: str = ""


# ---------- Responses ----------

class DayEntryRead(CycleLogBase):
    date: str
    is_period_day: bool
    has_spotting: bool
    temperature: float | None = None
    symptoms: list[str] = Field(default_factory=list)
    note: str = ""


class PeriodIntervalRead(CycleLogBase):
    start_date: str
    end_date: str | None = None
    is_ongoing: bool


class PredictionRead(CycleLogBase):
    next_period_date: str | None = None
    ovulation_date: str | None = None
    fertile_window: list[str] = Field(default_factory=list)


class PredictionSummaryRead(PredictionRead):
    average_cycle_length: int | None = None  # None = insufficient data


class DayIndicatorsRead(CycleLogBase):
    has_spotting: bool = False
    has_temperature: bool = False
    has_symptoms: bool = False
    has_note: bool = False


class CalendarCellRead(CycleLogBase):
    """A grid cell.  Cells outside the month carry only ``day``."""

    day: int
    is_current_month: bool
    date: str | None = None
    is_today: bool = False
    is_period_day: bool = False
    is_fertile_window: bool = False
    is_ovulation_day: bool = False
    indicators: DayIndicatorsRead | None = None


class CalendarViewRead(CycleLogBase):
    year: int
    month: int
    title: str
    cells: list[CalendarCellRead]
    prediction: PredictionRead
    average_cycle_length: int | None = None


class CommandResultRead(CycleLogBase):
    changed: bool
    messages: list[str] = Field(default_factory=list)
    view: CalendarViewRead


class ShareTextRead(CycleLogBase):
    date: str
    text: str


class TemperaturePointRead(CycleLogBase):
    date: str
    label: str
    temp: float
