"""Cycle length averaging and next-period / ovulation forecasting.

Calendar method only:

1. Average cycle length = mean gap between consecutive distinct period starts,
   ignoring implausible gaps (<= 10 or >= 60 days by default).  With fewer than
   two starts, or no usable gap, a 28-day cycle is assumed.
2. Next period = most recent period start + average cycle length.
3. Ovulation = next period - luteal phase (14 days).
4. Fertile window = 5 days before ovulation through 1 day after (7 days).

Thresholds come from ``cycle_config.yaml``.  Nothing is cached; every call
reads the store as it is now.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from cyclelog.tracker.config_loader import CycleConfig, get_cycle_config
from cyclelog.tracker.dates import add_days, days_between
from cyclelog.tracker.store import CycleLogStore

logger = logging.getLogger("cyclelog.tracker.prediction")


@dataclass
class CyclePrediction:
    """Forecast derived from the period history.

    All fields are empty when no period has been logged; callers must show
    that as "insufficient data", never as a date.

    Attributes:
        next_period_date: Predicted first day of the next period.
        ovulation_date:   Predicted ovulation day.
        fertile_window:   Consecutive dates of the fertile window, oldest first.
    """

    next_period_date: str | None = None
    ovulation_date: str | None = None
    fertile_window: list[str] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return self.next_period_date is not None


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class PredictionEngine:
    """Forecast cycles from a ``CycleLogStore``.

    Usage::

        engine = PredictionEngine(store)
        engine.average_cycle_length()      # 28
        prediction = engine.predict()
        prediction.next_period_date        # "2024-03-29"
    """

    def __init__(self, store: CycleLogStore, config: CycleConfig | None = None) -> None:
        self._store = store
        self._config = config or get_cycle_config()

    def cycle_gaps(self) -> list[int]:
        """Gaps in days between consecutive distinct period starts, outliers included."""
        starts = self._store.period_start_dates()
        return [days_between(prev, curr) for prev, curr in zip(starts, starts[1:])]

    def average_cycle_length(self) -> int:
        """Rounded mean cycle length in days, ignoring outlier gaps."""
        pc = self._config.prediction
        gaps = self.cycle_gaps()
        if not gaps:
            return pc.default_cycle_length

        usable = [g for g in gaps if pc.min_gap_days < g < pc.max_gap_days]
        if len(usable) < len(gaps):
            logger.debug(
                "Discarded %d outlier gap(s) outside (%d, %d) days",
                len(gaps) - len(usable),
                pc.min_gap_days,
                pc.max_gap_days,
            )
        if not usable:
            return pc.default_cycle_length
        return _round_half_up(sum(usable) / len(usable))

    def has_cycle_history(self) -> bool:
        """True once more than one period has been logged."""
        return len(self._store.periods) > 1

    def predict(self) -> CyclePrediction:
        latest_start = self._store.latest_period_start()
        if latest_start is None:
            return CyclePrediction()

        fw = self._config.fertile_window
        next_period = add_days(latest_start, self.average_cycle_length())
        ovulation = add_days(next_period, -self._config.prediction.luteal_phase_days)
        window = [
            add_days(ovulation, offset)
            for offset in range(-fw.days_before_ovulation, fw.days_after_ovulation + 1)
        ]
        return CyclePrediction(
            next_period_date=next_period,
            ovulation_date=ovulation,
            fertile_window=window,
        )
