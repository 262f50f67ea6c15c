"""Month grid generation for the calendar view.

A grid is a flat list of cells, seven per row.  Days belonging to the
neighbouring months pad the first and last rows and carry only their day
number; every day of the requested month carries its date string and the
flags the renderer needs (today, period, fertile window, ovulation, and one
indicator per logged data type).
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import MAXYEAR, MINYEAR, date
from typing import Union

from cyclelog.tracker.config_loader import CycleConfig, get_cycle_config
from cyclelog.tracker.dates import to_date_string
from cyclelog.tracker.prediction import CyclePrediction, PredictionEngine
from cyclelog.tracker.store import CycleLogStore


@dataclass
class DayIndicators:
    has_spotting: bool = False
    has_temperature: bool = False
    has_symptoms: bool = False
    has_note: bool = False


@dataclass
class ForeignCell:
    """A padding day from the previous or next month."""

    day: int
    is_current_month: bool = field(default=False, init=False)


@dataclass
class DayCell:
    """A day of the displayed month."""

    date: str
    day: int
    is_today: bool = False
    is_period_day: bool = False
    is_fertile_window: bool = False
    is_ovulation_day: bool = False
    indicators: DayIndicators = field(default_factory=DayIndicators)
    is_current_month: bool = field(default=True, init=False)


Cell = Union[ForeignCell, DayCell]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move ``delta`` months forward (or back) from year/month.

    Raises:
        ValueError: The result falls outside the years ``datetime.date`` supports.
    """
    index = year * 12 + (month - 1) + delta
    new_year = index // 12
    if not MINYEAR <= new_year <= MAXYEAR:
        raise ValueError(f"year must be between {MINYEAR} and {MAXYEAR}, got {new_year}")
    return new_year, index % 12 + 1


def month_title(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def day_indicators(store: CycleLogStore, day: str) -> DayIndicators:
    return DayIndicators(
        has_spotting=store.has_spotting(day),
        has_temperature=store.temperature_on(day) is not None,
        has_symptoms=bool(store.symptoms_on(day)),
        has_note=bool(store.note_on(day)),
    )


def build_month_grid(
    store: CycleLogStore,
    year: int,
    month: int,
    *,
    prediction: CyclePrediction | None = None,
    config: CycleConfig | None = None,
    today: date | None = None,
) -> list[Cell]:
    """Build the annotated grid for one month.

    Args:
        store:      Cycle log to read.
        year:       Four-digit year.
        month:      Month number, 1-12.
        prediction: Precomputed forecast; computed from ``store`` when omitted.
        config:     Heuristics config (first weekday of the grid).
        today:      Reference date for the ``is_today`` flag.

    Returns:
        Leading foreign cells, one DayCell per day, then trailing foreign
        cells; the length is always a multiple of 7.

    Raises:
        ValueError: ``month`` is outside 1-12.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")

    cfg = config or get_cycle_config()
    if prediction is None:
        prediction = PredictionEngine(store, cfg).predict()
    today_str = to_date_string(today or date.today())
    fertile = set(prediction.fertile_window)

    first_weekday, day_count = calendar.monthrange(year, month)
    leading = (first_weekday - cfg.first_weekday) % 7
    prev_day_count = 31 if month == 1 else calendar.monthrange(year, month - 1)[1]

    cells: list[Cell] = [
        ForeignCell(day) for day in range(prev_day_count - leading + 1, prev_day_count + 1)
    ]

    for day in range(1, day_count + 1):
        day_str = to_date_string(date(year, month, day))
        cells.append(
            DayCell(
                date=day_str,
                day=day,
                is_today=day_str == today_str,
                is_period_day=store.is_period_day(day_str),
                is_fertile_window=day_str in fertile,
                is_ovulation_day=day_str == prediction.ovulation_date,
                indicators=day_indicators(store, day_str),
            )
        )

    trailing = (7 - (leading + day_count) % 7) % 7
    cells.extend(ForeignCell(day) for day in range(1, trailing + 1))
    return cells
