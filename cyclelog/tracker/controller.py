"""Command handlers tying the store, forecasts and persistence together.

Every command follows the same pipeline::

    mutate store  ->  persist serialize()  ->  derive prediction + month grid

and returns the freshly derived view.  Commands that turn out to change
nothing (starting a period on a period day, an invalid period end) skip the
persistence step and report ``changed=False``.  If persisting fails the
store is rolled back to its state before the command and the
``StorageError`` propagates.

Public methods hold the controller's lock, so one controller can be shared
by request handlers running in a thread pool.
"""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable

from cyclelog.models.snapshot import SymptomCode
from cyclelog.services.storage import CycleLogStorage, StorageError
from cyclelog.tracker.backup import ConfirmImport, SaveFile, export_backup, import_backup
from cyclelog.tracker.calendar_grid import Cell, build_month_grid, month_title, shift_month
from cyclelog.tracker.config_loader import CycleConfig, get_cycle_config
from cyclelog.tracker.prediction import CyclePrediction, PredictionEngine
from cyclelog.tracker.share import TemperaturePoint, build_share_text, temperature_series
from cyclelog.tracker.store import CycleLogStore, DayEntry

logger = logging.getLogger("cyclelog.tracker.controller")


def _synchronized(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class InvalidEntryError(ValueError):
    """Raised when a day entry carries a value the log will not accept."""


@dataclass
class CalendarView:
    """Everything the renderer needs for one month."""

    year: int
    month: int
    title: str
    cells: list[Cell]
    prediction: CyclePrediction
    average_cycle_length: int | None  # None until more than one period is logged


@dataclass
class CommandResult:
    changed: bool
    view: CalendarView
    messages: list[str] = field(default_factory=list)


class CycleLogController:
    """Owns the session's store and runs user commands against it.

    Usage::

        controller = CycleLogController(CycleLogStore.from_persisted(storage.load()), storage)
        result = controller.start_period("2024-04-01")
        result.view.prediction.next_period_date
    """

    def __init__(
        self,
        store: CycleLogStore,
        storage: CycleLogStorage,
        config: CycleConfig | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self._storage = storage
        self._config = config or get_cycle_config()
        self._clock = clock
        self._lock = threading.RLock()
        today = clock()
        self.year = today.year
        self.month = today.month

    @property
    def config(self) -> CycleConfig:
        return self._config

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @_synchronized
    def prediction(self) -> CyclePrediction:
        return PredictionEngine(self.store, self._config).predict()

    @_synchronized
    def average_cycle_length(self) -> int | None:
        engine = PredictionEngine(self.store, self._config)
        return engine.average_cycle_length() if engine.has_cycle_history() else None

    @_synchronized
    def view(self, year: int | None = None, month: int | None = None) -> CalendarView:
        """Derive the calendar for ``year``/``month`` (the visible month by default)."""
        year = self.year if year is None else year
        month = self.month if month is None else month
        engine = PredictionEngine(self.store, self._config)
        prediction = engine.predict()
        cells = build_month_grid(
            self.store,
            year,
            month,
            prediction=prediction,
            config=self._config,
            today=self._clock(),
        )
        return CalendarView(
            year=year,
            month=month,
            title=month_title(year, month),
            cells=cells,
            prediction=prediction,
            average_cycle_length=(
                engine.average_cycle_length() if engine.has_cycle_history() else None
            ),
        )

    @_synchronized
    def show_month(self, year: int, month: int) -> CalendarView:
        view = self.view(year, month)  # validates month before it becomes visible
        self.year, self.month = year, month
        return view

    @_synchronized
    def show_previous_month(self) -> CalendarView:
        return self.show_month(*shift_month(self.year, self.month, -1))

    @_synchronized
    def show_next_month(self) -> CalendarView:
        return self.show_month(*shift_month(self.year, self.month, 1))

    @_synchronized
    def day_entry(self, day: str) -> DayEntry:
        return self.store.day_entry(day)

    @_synchronized
    def share_text(self, day: str) -> str:
        return build_share_text(self.store, day, self._config)

    @_synchronized
    def temperature_chart(self) -> list[TemperaturePoint]:
        return temperature_series(self.store, self._config, today=self._clock())

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _commit(
        self, before: CycleLogStore, changed: bool, messages: Iterable[str] = ()
    ) -> CommandResult:
        if changed:
            try:
                self._storage.save(self.store.serialize())
            except StorageError:
                logger.warning("Save failed; rolling the cycle log back")
                self.store.replace_with(before)
                raise
        return CommandResult(changed=changed, view=self.view(), messages=list(messages))

    @_synchronized
    def start_period(self, day: str) -> CommandResult:
        before = self.store.copy()
        if not self.store.start_period(day):
            logger.debug("start_period(%s) ignored: already a period day", day)
            return self._commit(before, False, [f"{day} is already a period day"])
        return self._commit(before, True)

    @_synchronized
    def end_period(self, day: str) -> CommandResult:
        before = self.store.copy()
        if not self.store.end_period(day):
            logger.debug("end_period(%s) ignored: no ongoing period starting on or before it", day)
            return self._commit(before, False, ["No ongoing period to end on this day"])
        return self._commit(before, True)

    @_synchronized
    def log_spotting(self, day: str) -> CommandResult:
        before = self.store.copy()
        self.store.log_spotting(day)
        return self._commit(before, True)

    @_synchronized
    def clear_period(self, day: str) -> CommandResult:
        before = self.store.copy()
        self.store.clear_period_data(day)
        return self._commit(before, True)

    @_synchronized
    def save_day(
        self,
        day: str,
        temperature: float | None = None,
        symptoms: Iterable[str] = (),
        note: str = "",
    ) -> CommandResult:
        """Apply the day editor: temperature, symptoms and note in one save.

        Empty values remove whatever was logged before.

        Raises:
            InvalidEntryError: Temperature outside the plausible range, or an
                unknown symptom code.  Nothing is changed.
        """
        if temperature is not None and not self._config.temperature.is_plausible(temperature):
            t = self._config.temperature
            raise InvalidEntryError(
                f"Temperature {temperature} °C is outside {t.min_c}-{t.max_c} °C"
            )
        symptoms = list(symptoms)
        known = {code.value for code in SymptomCode}
        unknown = [s for s in symptoms if s not in known]
        if unknown:
            raise InvalidEntryError(f"Unknown symptom code(s): {', '.join(unknown)}")

        before = self.store.copy()
        self.store.set_temperature(day, temperature)
        self.store.set_symptoms(day, symptoms)
        self.store.set_note(day, note)
        return self._commit(before, True)

    @_synchronized
    def import_backup(self, raw_text: str | bytes, confirm: ConfirmImport) -> CommandResult:
        """Replace the whole log with a backup file's content.

        Raises:
            ImportParseError: The file is not a valid backup; nothing changes.
        """
        before = self.store.copy()
        imported = import_backup(self.store, raw_text, confirm)
        return self._commit(
            before, imported, ["Backup imported"] if imported else ["Import cancelled"]
        )

    @_synchronized
    def export_backup(self, save: SaveFile) -> str:
        return export_backup(self.store, save, today=self._clock())
