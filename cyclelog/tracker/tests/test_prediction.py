"""Tests for cycle length averaging and forecasts."""

from __future__ import annotations

from dataclasses import replace

import pytest

from cyclelog.tracker.config_loader import CycleConfig
from cyclelog.tracker.prediction import CyclePrediction, PredictionEngine
from cyclelog.tracker.store import CycleLogStore, PeriodInterval


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def store_with_starts(*starts: str) -> CycleLogStore:
    return CycleLogStore(periods=[PeriodInterval(s, s) for s in starts])


# ---------------------------------------------------------------------------
# Average cycle length
# ---------------------------------------------------------------------------


class TestAverageCycleLength:
    def test_regular_28_day_cycles(self, cycle_config: CycleConfig) -> None:
        store = store_with_starts("2024-01-01", "2024-01-29", "2024-02-26")
        assert PredictionEngine(store, cycle_config).average_cycle_length() == 28

    def test_outlier_gap_is_discarded(self, cycle_config: CycleConfig) -> None:
        # 3-day gap (outlier) followed by a 30-day gap
        store = store_with_starts("2024-01-01", "2024-01-04", "2024-02-03")
        engine = PredictionEngine(store, cycle_config)
        assert engine.cycle_gaps() == [3, 30]
        assert engine.average_cycle_length() == 30

    def test_no_periods_defaults_to_28(
        self, empty_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        assert PredictionEngine(empty_store, cycle_config).average_cycle_length() == 28

    def test_single_start_defaults_to_28(self, cycle_config: CycleConfig) -> None:
        store = store_with_starts("2024-01-01")
        assert PredictionEngine(store, cycle_config).average_cycle_length() == 28

    def test_duplicate_starts_count_once(self, cycle_config: CycleConfig) -> None:
        store = CycleLogStore(
            periods=[
                PeriodInterval("2024-01-01", "2024-01-03"),
                PeriodInterval("2024-01-01", "2024-01-05"),
            ]
        )
        assert PredictionEngine(store, cycle_config).average_cycle_length() == 28

    def test_all_gaps_outliers_defaults_to_28(self, cycle_config: CycleConfig) -> None:
        store = store_with_starts("2024-01-01", "2024-01-08", "2024-04-01")
        assert PredictionEngine(store, cycle_config).average_cycle_length() == 28

    @pytest.mark.parametrize(
        "second_start, expected",
        [
            ("2024-01-11", 28),  # exactly 10 days: outlier
            ("2024-01-12", 11),  # 11 days: kept
            ("2024-02-29", 59),  # 59 days: kept
            ("2024-03-01", 28),  # exactly 60 days: outlier
        ],
    )
    def test_threshold_boundaries(
        self, cycle_config: CycleConfig, second_start: str, expected: int
    ) -> None:
        store = store_with_starts("2024-01-01", second_start)
        assert PredictionEngine(store, cycle_config).average_cycle_length() == expected

    def test_mean_rounds_half_up(self, cycle_config: CycleConfig) -> None:
        # gaps 28 and 29 → 28.5 → 29
        store = store_with_starts("2024-01-01", "2024-01-29", "2024-02-27")
        assert PredictionEngine(store, cycle_config).average_cycle_length() == 29

    def test_thresholds_follow_config(self, cycle_config: CycleConfig) -> None:
        strict = replace(
            cycle_config, prediction=replace(cycle_config.prediction, min_gap_days=29)
        )
        store = store_with_starts("2024-01-01", "2024-01-29", "2024-03-01")
        # 28 is now an outlier, 32 is kept
        assert PredictionEngine(store, strict).average_cycle_length() == 32

    def test_has_cycle_history_needs_two_periods(self, cycle_config: CycleConfig) -> None:
        assert not PredictionEngine(store_with_starts("2024-01-01"), cycle_config).has_cycle_history()
        assert PredictionEngine(
            store_with_starts("2024-01-01", "2024-01-29"), cycle_config
        ).has_cycle_history()


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------


class TestPredict:
    def test_no_periods_gives_empty_prediction(
        self, empty_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        prediction = PredictionEngine(empty_store, cycle_config).predict()
        assert prediction == CyclePrediction()
        assert prediction.next_period_date is None
        assert prediction.ovulation_date is None
        assert prediction.fertile_window == []
        assert not prediction.has_data

    def test_forecast_from_latest_start(self, cycle_config: CycleConfig) -> None:
        store = store_with_starts("2024-02-02", "2024-03-01")  # 28-day gap
        prediction = PredictionEngine(store, cycle_config).predict()
        assert prediction.next_period_date == "2024-03-29"
        assert prediction.ovulation_date == "2024-03-15"
        assert prediction.fertile_window == [
            "2024-03-10",
            "2024-03-11",
            "2024-03-12",
            "2024-03-13",
            "2024-03-14",
            "2024-03-15",
            "2024-03-16",
        ]

    def test_single_period_uses_default_length(self, cycle_config: CycleConfig) -> None:
        prediction = PredictionEngine(store_with_starts("2024-03-01"), cycle_config).predict()
        assert prediction.next_period_date == "2024-03-29"

    def test_latest_start_found_regardless_of_order(self, cycle_config: CycleConfig) -> None:
        store = store_with_starts("2024-03-01", "2024-01-04", "2024-02-02")
        prediction = PredictionEngine(store, cycle_config).predict()
        # gaps 29 and 28 → 28.5 → 29 days after 2024-03-01
        assert prediction.next_period_date == "2024-03-30"

    def test_ongoing_period_counts_as_latest_start(
        self, history_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        history_store.start_period("2024-03-25")
        prediction = PredictionEngine(history_store, cycle_config).predict()
        # gaps 28, 28, 28 → 28 days after 2024-03-25
        assert prediction.next_period_date == "2024-04-22"

    def test_recomputed_after_mutation(
        self, history_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        engine = PredictionEngine(history_store, cycle_config)
        assert engine.predict().next_period_date == "2024-03-25"
        history_store.clear_period_data("2024-02-26")
        assert engine.predict().next_period_date == "2024-02-26"

    def test_fertile_window_is_seven_consecutive_days(
        self, history_store: CycleLogStore, cycle_config: CycleConfig
    ) -> None:
        window = PredictionEngine(history_store, cycle_config).predict().fertile_window
        assert len(window) == 7
        assert window == sorted(window)
        assert len(set(window)) == 7
