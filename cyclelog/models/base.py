"""Shared Pydantic base models and utilities."""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict

from cyclelog.tracker.dates import parse_date


def _check_date_string(value: str) -> str:
    parse_date(value)  # raises ValueError, which pydantic reports as a validation error
    return value


# A zero-padded YYYY-MM-DD calendar date kept as a string
DateString = Annotated[str, AfterValidator(_check_date_string)]


class CycleLogBase(BaseModel):
    """Base model with shared config for all cycle log schemas."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
