"""In-memory cycle log: period intervals plus four per-date collections.

The store is the single mutable source of truth for a session.  It never
persists itself; callers hand ``serialize()`` output to a storage backend
after each change.

Per-date collections (spotting, temperatures, symptoms, notes) follow one
upsert rule: a record with an empty payload is never stored, so the mere
presence of a record means something was logged that day.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Union

from pydantic import ValidationError

from cyclelog.models.snapshot import (
    CycleLogSnapshot,
    NoteSchema,
    PeriodIntervalSchema,
    SpottingSchema,
    SymptomCode,
    SymptomSchema,
    TemperatureSchema,
)
from cyclelog.tracker.dates import add_days

logger = logging.getLogger("cyclelog.tracker.store")


class ImportParseError(ValueError):
    """Raised when a serialized cycle log cannot be read.

    The store being loaded into is never modified when this is raised.
    """


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PeriodInterval:
    """One period, from its first day to its last.

    ``end_date`` is None while the period is ongoing.  An ongoing interval
    counts only its start day as a period day.
    """

    start_date: str
    end_date: str | None = None

    @property
    def is_ongoing(self) -> bool:
        return self.end_date is None

    def contains(self, date: str) -> bool:
        return self.start_date <= date <= (self.end_date or self.start_date)


@dataclass(frozen=True)
class SpottingEvent:
    date: str

    def has_payload(self) -> bool:
        return True


@dataclass(frozen=True)
class TemperatureReading:
    date: str
    temp: float | None = None  # °C

    def has_payload(self) -> bool:
        return self.temp is not None


@dataclass(frozen=True)
class SymptomLog:
    date: str
    items: tuple[str, ...] = ()  # symptom codes, no duplicates

    def has_payload(self) -> bool:
        return len(self.items) > 0


@dataclass(frozen=True)
class Note:
    date: str
    text: str = ""

    def has_payload(self) -> bool:
        return bool(self.text.strip())


DailyRecord = Union[SpottingEvent, TemperatureReading, SymptomLog, Note]

_RECORD_TYPES: dict[str, type] = {
    "spotting": SpottingEvent,
    "temperatures": TemperatureReading,
    "symptoms": SymptomLog,
    "notes": Note,
}

COLLECTION_KEYS = tuple(_RECORD_TYPES)


@dataclass
class DayEntry:
    """Everything logged for a single day, as shown in the day editor."""

    date: str
    is_period_day: bool = False
    has_spotting: bool = False
    temperature: float | None = None
    symptoms: list[str] = field(default_factory=list)
    note: str = ""


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class CycleLogStore:
    """The cycle log aggregate.

    Usage::

        store = CycleLogStore()
        store.start_period("2024-03-01")
        store.end_period("2024-03-05")
        store.set_symptoms("2024-03-01", ["cramps"])
        payload = store.serialize()
    """

    def __init__(
        self,
        periods: Iterable[PeriodInterval] = (),
        spotting: Iterable[SpottingEvent] = (),
        temperatures: Iterable[TemperatureReading] = (),
        symptoms: Iterable[SymptomLog] = (),
        notes: Iterable[Note] = (),
    ) -> None:
        self._periods: list[PeriodInterval] = list(periods)
        self._collections: dict[str, list[Any]] = {key: [] for key in COLLECTION_KEYS}
        for key, records in (
            ("spotting", spotting),
            ("temperatures", temperatures),
            ("symptoms", symptoms),
            ("notes", notes),
        ):
            for record in records:
                self.upsert(key, record, record.has_payload())

    # ------------------------------------------------------------------
    # Per-date collections
    # ------------------------------------------------------------------

    def _collection(self, key: str) -> list[Any]:
        try:
            return self._collections[key]
        except KeyError:
            raise KeyError(
                f"Unknown collection {key!r}; expected one of {', '.join(COLLECTION_KEYS)}"
            ) from None

    def upsert(self, key: str, record: DailyRecord, should_exist: bool) -> None:
        """Insert, replace or remove the record for ``record.date``.

        Args:
            key:          Collection name ('spotting', 'temperatures', 'symptoms', 'notes').
            record:       Candidate record.
            should_exist: False removes any existing record for that date
                          instead of storing an empty one.

        Raises:
            KeyError:  Unknown collection.
            TypeError: Record type does not belong to the collection.
        """
        records = self._collection(key)
        if not isinstance(record, _RECORD_TYPES[key]):
            raise TypeError(
                f"{type(record).__name__} cannot be stored in {key!r}"
            )

        index = next(
            (i for i, existing in enumerate(records) if existing.date == record.date),
            None,
        )
        if index is not None:
            if should_exist:
                records[index] = record
            else:
                del records[index]
        elif should_exist:
            records.append(record)

    def _find(self, key: str, date: str) -> Any | None:
        return next((r for r in self._collections[key] if r.date == date), None)

    def log_spotting(self, date: str) -> None:
        self.upsert("spotting", SpottingEvent(date), True)

    def set_temperature(self, date: str, temp: float | None) -> None:
        reading = TemperatureReading(date, temp)
        self.upsert("temperatures", reading, reading.has_payload())

    def set_symptoms(self, date: str, items: Iterable[str]) -> None:
        """Record the symptoms for a day; an empty set removes the record.

        Raises:
            ValueError: An item is not a known symptom code.
        """
        codes = tuple(dict.fromkeys(SymptomCode(item).value for item in items))
        log = SymptomLog(date, codes)
        self.upsert("symptoms", log, log.has_payload())

    def set_note(self, date: str, text: str) -> None:
        note = Note(date, text.strip())
        self.upsert("notes", note, note.has_payload())

    # ------------------------------------------------------------------
    # Period intervals
    # ------------------------------------------------------------------

    def is_period_day(self, date: str) -> bool:
        return any(p.contains(date) for p in self._periods)

    def _ongoing_index(self) -> int | None:
        return next(
            (i for i, p in enumerate(self._periods) if p.is_ongoing), None
        )

    def ongoing_period(self) -> PeriodInterval | None:
        index = self._ongoing_index()
        return self._periods[index] if index is not None else None

    def start_period(self, date: str) -> bool:
        """Mark ``date`` as the first day of a new period.

        An ongoing period is closed on the day before ``date`` so the two
        intervals cannot overlap.  A start that falls before the ongoing
        period's own start cannot close it; it is recorded as a single day
        and the ongoing period is left open.  Closing the ongoing period at
        the day before would give it an end before its start.

        Returns:
            False if ``date`` is already a period day (nothing changed).
        """
        if self.is_period_day(date):
            return False

        end_date: str | None = None
        index = self._ongoing_index()
        if index is not None:
            ongoing = self._periods[index]
            day_before = add_days(date, -1)
            if day_before >= ongoing.start_date:
                self._periods[index] = replace(ongoing, end_date=day_before)
                logger.debug("Closed ongoing period %s at %s", ongoing.start_date, day_before)
            else:
                end_date = date

        self._periods.append(PeriodInterval(date, end_date))
        return True

    def end_period(self, date: str) -> bool:
        """Mark ``date`` as the last day of the ongoing period.

        Returns:
            False (and changes nothing) when no period is ongoing or ``date``
            is before its start.
        """
        index = self._ongoing_index()
        if index is None:
            return False
        ongoing = self._periods[index]
        if date < ongoing.start_date:
            return False
        self._periods[index] = replace(ongoing, end_date=date)
        return True

    def clear_period_data(self, date: str) -> None:
        """Remove every period containing ``date`` and the spotting on ``date``."""
        self._periods = [p for p in self._periods if not p.contains(date)]
        self._collections["spotting"] = [
            s for s in self._collections["spotting"] if s.date != date
        ]

    def period_start_dates(self) -> list[str]:
        """Distinct period start dates, oldest first."""
        return sorted({p.start_date for p in self._periods})

    def latest_period_start(self) -> str | None:
        return max((p.start_date for p in self._periods), default=None)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def periods(self) -> list[PeriodInterval]:
        return list(self._periods)

    @property
    def spotting(self) -> list[SpottingEvent]:
        return list(self._collections["spotting"])

    @property
    def temperatures(self) -> list[TemperatureReading]:
        return list(self._collections["temperatures"])

    @property
    def symptoms(self) -> list[SymptomLog]:
        return list(self._collections["symptoms"])

    @property
    def notes(self) -> list[Note]:
        return list(self._collections["notes"])

    def has_spotting(self, date: str) -> bool:
        return self._find("spotting", date) is not None

    def temperature_on(self, date: str) -> float | None:
        reading = self._find("temperatures", date)
        return reading.temp if reading else None

    def symptoms_on(self, date: str) -> list[str]:
        log = self._find("symptoms", date)
        return list(log.items) if log else []

    def note_on(self, date: str) -> str:
        note = self._find("notes", date)
        return note.text if note else ""

    def day_entry(self, date: str) -> DayEntry:
        return DayEntry(
            date=date,
            is_period_day=self.is_period_day(date),
            has_spotting=self.has_spotting(date),
            temperature=self.temperature_on(date),
            symptoms=self.symptoms_on(date),
            note=self.note_on(date),
        )

    def is_empty(self) -> bool:
        return not self._periods and not any(self._collections.values())

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_snapshot(self) -> CycleLogSnapshot:
        return CycleLogSnapshot(
            periods=[
                PeriodIntervalSchema(start_date=p.start_date, end_date=p.end_date)
                for p in self._periods
            ],
            spotting=[SpottingSchema(date=s.date) for s in self.spotting],
            temperatures=[
                TemperatureSchema(date=t.date, temp=t.temp) for t in self.temperatures
            ],
            symptoms=[
                SymptomSchema(date=s.date, items=list(s.items)) for s in self.symptoms
            ],
            notes=[NoteSchema(date=n.date, text=n.text) for n in self.notes],
        )

    def serialize(self) -> str:
        """Dump all five collections as an indented JSON document."""
        return self.to_snapshot().to_json()

    @classmethod
    def from_snapshot(cls, snapshot: CycleLogSnapshot) -> CycleLogStore:
        """Build a store from a validated snapshot.

        Records with an empty payload are dropped and a later record for the
        same date replaces an earlier one, exactly as if each had been upserted.

        Raises:
            ImportParseError: More than one period is ongoing.
        """
        ongoing = [p for p in snapshot.periods if p.end_date is None]
        if len(ongoing) > 1:
            raise ImportParseError(
                f"{len(ongoing)} periods have no endDate; at most one may be ongoing"
            )
        return cls(
            periods=[PeriodInterval(p.start_date, p.end_date) for p in snapshot.periods],
            spotting=[SpottingEvent(s.date) for s in snapshot.spotting],
            temperatures=[TemperatureReading(t.date, t.temp) for t in snapshot.temperatures],
            symptoms=[
                SymptomLog(s.date, tuple(item.value for item in s.items))
                for s in snapshot.symptoms
            ],
            notes=[Note(n.date, n.text) for n in snapshot.notes],
        )

    @classmethod
    def parse(cls, payload: str | bytes) -> CycleLogStore:
        """Parse a serialized cycle log into a new, detached store.

        Raises:
            ImportParseError: The payload is not a valid cycle log document.
        """
        try:
            snapshot = CycleLogSnapshot.model_validate_json(payload)
        except ValidationError as exc:
            raise ImportParseError(
                f"Not a valid cycle log: {exc.error_count()} problem(s), first: "
                f"{_describe_first_error(exc)}"
            ) from exc
        return cls.from_snapshot(snapshot)

    def deserialize(self, payload: str | bytes) -> None:
        """Replace the whole store with the content of ``payload``.

        Missing fields become empty collections.  Nothing is changed if the
        payload is malformed.

        Raises:
            ImportParseError: The payload is not a valid cycle log document.
        """
        self.replace_with(self.parse(payload))

    def copy(self) -> CycleLogStore:
        """Independent copy; records are immutable so only the lists are copied."""
        clone = CycleLogStore(periods=self._periods)
        clone._collections = {key: list(records) for key, records in self._collections.items()}
        return clone

    def replace_with(self, other: CycleLogStore) -> None:
        self._periods = list(other._periods)
        self._collections = {key: list(records) for key, records in other._collections.items()}
        logger.info(
            "Cycle log replaced: %d period(s), %d daily record(s)",
            len(self._periods),
            sum(len(records) for records in self._collections.values()),
        )

    @classmethod
    def from_persisted(cls, payload: str | bytes | None) -> CycleLogStore:
        """Hydrate a store from local storage, tolerating damage.

        Unlike ``parse``, this never raises: an unreadable document gives an
        empty store and an unreadable field gives an empty collection for
        that field only.
        """
        if not payload:
            return cls()
        try:
            raw = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Persisted cycle log is not valid JSON, starting empty: %s", exc)
            return cls()
        if not isinstance(raw, dict):
            logger.warning(
                "Persisted cycle log is a %s, not an object; starting empty",
                type(raw).__name__,
            )
            return cls()

        fields: dict[str, Any] = {}
        for name in CycleLogSnapshot.model_fields:
            if name not in raw:
                continue
            try:
                fields[name] = getattr(
                    CycleLogSnapshot.model_validate({name: raw[name]}), name
                )
            except ValidationError as exc:
                logger.warning(
                    "Ignoring malformed persisted field %r: %s",
                    name,
                    _describe_first_error(exc),
                )

        snapshot = CycleLogSnapshot(**fields)
        try:
            return cls.from_snapshot(snapshot)
        except ImportParseError as exc:
            logger.warning("Ignoring persisted periods: %s", exc)
            return cls.from_snapshot(snapshot.model_copy(update={"periods": []}))


def _describe_first_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "document"
    return f"{location}: {first.get('msg', 'invalid value')}"
