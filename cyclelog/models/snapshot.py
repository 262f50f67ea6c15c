"""Pydantic models for the persisted / exported cycle log document.

The same JSON layout is written to local storage after every change and
offered to the user as a backup file, so field names are fixed (camelCase)
and must stay stable across releases::

    {
      "periods":      [{"startDate": "2024-03-01", "endDate": "2024-03-05"}],
      "spotting":     [{"date": "2024-03-20"}],
      "temperatures": [{"date": "2024-03-02", "temp": 36.45}],
      "symptoms":     [{"date": "2024-03-01", "items": ["cramps", "fatigue"]}],
      "notes":        [{"date": "2024-03-01", "text": "Heavy first day"}]
    }

Any of the five arrays may be missing; it is read as empty.
"""

from __future__ import annotations

from enum import Enum

from pydantic import ConfigDict, Field, field_validator, model_validator

from cyclelog.models.base import CycleLogBase, DateString


class SymptomCode(str, Enum):
    cramps = "cramps"
    headache = "headache"
    fatigue = "fatigue"
    bloating = "bloating"
    nausea = "nausea"
    dizziness = "dizziness"
    anxiety = "anxiety"
    irritability = "irritability"
    sadness = "sadness"


class PeriodIntervalSchema(CycleLogBase):
    start_date: DateString = Field(alias="startDate")
    end_date: DateString | None = Field(default=None, alias="endDate")

    @model_validator(mode="after")
    def _end_not_before_start(self) -> PeriodIntervalSchema:
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError(
                f"endDate {self.end_date} is before startDate {self.start_date}"
            )
        return self


class SpottingSchema(CycleLogBase):
    date: DateString


class TemperatureSchema(CycleLogBase):
    model_config = ConfigDict(allow_inf_nan=False)

    date: DateString
    temp: float | None = None


class SymptomSchema(CycleLogBase):
    date: DateString
    items: list[SymptomCode] = Field(default_factory=list)

    @field_validator("items")
    @classmethod
    def _dedupe(cls, items: list[SymptomCode]) -> list[SymptomCode]:
        return list(dict.fromkeys(items))


class NoteSchema(CycleLogBase):
    date: DateString
    text: str = ""


class CycleLogSnapshot(CycleLogBase):
    """The whole cycle log as one document."""

    periods: list[PeriodIntervalSchema] = Field(default_factory=list)
    spotting: list[SpottingSchema] = Field(default_factory=list)
    temperatures: list[TemperatureSchema] = Field(default_factory=list)
    symptoms: list[SymptomSchema] = Field(default_factory=list)
    notes: list[NoteSchema] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
