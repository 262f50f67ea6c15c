"""Tests for month grid generation."""

from __future__ import annotations

import calendar
import math
from dataclasses import replace
from datetime import date

import pytest

from cyclelog.tracker.calendar_grid import (
    DayCell,
    ForeignCell,
    build_month_grid,
    month_title,
    shift_month,
)
from cyclelog.tracker.config_loader import CycleConfig
from cyclelog.tracker.store import CycleLogStore

TEST_DATE = date(2024, 3, 20)


def day_cells(cells: list) -> list[DayCell]:
    return [c for c in cells if isinstance(c, DayCell)]


def cell_for(cells: list, day: str) -> DayCell:
    return next(c for c in day_cells(cells) if c.date == day)


class TestGridShape:
    def test_thirty_day_month_starting_midweek(
        self, empty_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        # June 2022 starts on a Wednesday
        cells = build_month_grid(empty_store, 2022, 6, config=cycle_config, today=TEST_DATE)
        assert len(cells) % 7 == 0
        assert len(cells) == 35

        days = day_cells(cells)
        assert len(days) == 30
        assert [c.date for c in days] == [f"2022-06-{d:02d}" for d in range(1, 31)]

        # Sunday-first grid: Sun 29, Mon 30, Tue 31 of May lead in
        assert cells[:3] == [ForeignCell(29), ForeignCell(30), ForeignCell(31)]
        assert cells[-2:] == [ForeignCell(1), ForeignCell(2)]

    def test_aligned_month_has_no_padding(
        self, empty_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        # February 2015: 28 days starting on a Sunday
        cells = build_month_grid(empty_store, 2015, 2, config=cycle_config, today=TEST_DATE)
        assert len(cells) == 28
        assert all(isinstance(c, DayCell) for c in cells)

    def test_january_leads_with_december_tail(
        self, empty_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        # 2025-01-01 is a Wednesday
        cells = build_month_grid(empty_store, 2025, 1, config=cycle_config, today=TEST_DATE)
        assert cells[:3] == [ForeignCell(29), ForeignCell(30), ForeignCell(31)]

    def test_monday_first_weekday(
        self, empty_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        monday_first = replace(cycle_config, first_weekday=calendar.MONDAY)
        cells = build_month_grid(empty_store, 2022, 6, config=monday_first, today=TEST_DATE)
        assert cells[:2] == [ForeignCell(30), ForeignCell(31)]
        assert isinstance(cells[2], DayCell) and cells[2].day == 1
        assert len(cells) % 7 == 0

    @pytest.mark.parametrize("year", [2023, 2024])
    def test_every_month_is_whole_rows(
        self, empty_store: CycleLogStore, cycle_config: CycleConfig, year: int
    ) -> None:
        for month in range(1, 13):
            cells = build_month_grid(empty_store, year, month, config=cycle_config, today=TEST_DATE)
            day_count = calendar.monthrange(year, month)[1]
            leading = next(i for i, c in enumerate(cells) if isinstance(c, DayCell))
            assert len(cells) % 7 == 0
            assert len(cells) // 7 == math.ceil((leading + day_count) / 7)
            assert len(day_cells(cells)) == day_count

    def test_invalid_month_rejected(
        self, empty_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        with pytest.raises(ValueError):
            build_month_grid(empty_store, 2024, 13, config=cycle_config)


class TestCellFlags:
    def test_flags_and_indicators(
        self, history_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        history_store.log_spotting("2024-03-05")
        history_store.set_symptoms("2024-03-06", ["headache"])
        history_store.set_note("2024-03-07", "gym")
        cells = build_month_grid(history_store, 2024, 3, config=cycle_config, today=TEST_DATE)

        # Next period 2024-03-25 → ovulation 03-11, fertile 03-06..03-12
        assert cell_for(cells, "2024-03-11").is_ovulation_day
        assert [c.date for c in day_cells(cells) if c.is_fertile_window] == [
            f"2024-03-{d:02d}" for d in range(6, 13)
        ]
        assert [c.date for c in day_cells(cells) if c.is_ovulation_day] == ["2024-03-11"]

        assert cell_for(cells, "2024-03-01").is_period_day
        assert not cell_for(cells, "2024-03-02").is_period_day

        assert cell_for(cells, "2024-03-20").is_today
        assert sum(c.is_today for c in day_cells(cells)) == 1

        assert cell_for(cells, "2024-03-02").indicators.has_temperature
        assert cell_for(cells, "2024-03-05").indicators.has_spotting
        assert cell_for(cells, "2024-03-06").indicators.has_symptoms
        assert cell_for(cells, "2024-03-07").indicators.has_note
        blank = cell_for(cells, "2024-03-08").indicators
        assert not any(
            [blank.has_spotting, blank.has_temperature, blank.has_symptoms, blank.has_note]
        )

    def test_empty_store_has_no_forecast_flags(
        self, empty_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        cells = day_cells(
            build_month_grid(empty_store, 2024, 3, config=cycle_config, today=TEST_DATE)
        )
        assert not any(c.is_fertile_window or c.is_ovulation_day for c in cells)

    def test_foreign_cells_carry_no_data(
        self, history_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        cells = build_month_grid(history_store, 2024, 3, config=cycle_config, today=TEST_DATE)
        # March 2024 starts on a Friday: Feb 25..29 lead in
        assert cells[:5] == [ForeignCell(d) for d in range(25, 30)]
        assert not cells[0].is_current_month
        assert len(cells) == 42


class TestMonthNavigation:
    def test_shift_month_wraps_years(self) -> None:
        assert shift_month(2024, 1, -1) == (2023, 12)
        assert shift_month(2024, 12, 1) == (2025, 1)
        assert shift_month(2024, 3, 0) == (2024, 3)
        assert shift_month(2024, 3, -15) == (2022, 12)

    def test_month_title(self) -> None:
        assert month_title(2024, 3) == "March 2024"

    def test_shift_month_stays_within_supported_years(self) -> None:
        with pytest.raises(ValueError, match="year"):
            shift_month(9999, 12, 1)
        with pytest.raises(ValueError, match="year"):
            shift_month(1, 1, -1)

    def test_grid_at_first_and_last_supported_months(
        self, empty_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        first = build_month_grid(empty_store, 1, 1, config=cycle_config, today=TEST_DATE)
        # 0001-01-01 is a Monday: one lead-in day from the December before
        assert first[0] == ForeignCell(31)
        assert first[1].date == "0001-01-01"
        last = build_month_grid(empty_store, 9999, 12, config=cycle_config, today=TEST_DATE)
        assert len(last) % 7 == 0
        assert day_cells(last)[-1].date == "9999-12-31"
