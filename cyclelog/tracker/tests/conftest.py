"""Shared fixtures for the cycle log core tests."""

from __future__ import annotations

import json
from datetime import date

import pytest

from cyclelog.services.storage import MemoryStorage
from cyclelog.tracker.config_loader import CycleConfig, load_cycle_config
from cyclelog.tracker.store import CycleLogStore

# Reference "today" for date-sensitive tests
TEST_DATE = date(2024, 3, 20)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_config() -> CycleConfig:
    """Load the bundled cycle config for tests."""
    return load_cycle_config()


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def empty_store() -> CycleLogStore:
    return CycleLogStore()


@pytest.fixture
def history_payload() -> dict:
    """Three regular 28-day cycles plus one of each daily record type."""
    return {
        "periods": [
            {"startDate": "2024-01-01", "endDate": "2024-01-05"},
            {"startDate": "2024-01-29", "endDate": "2024-02-02"},
            {"startDate": "2024-02-26", "endDate": "2024-03-01"},
        ],
        "spotting": [{"date": "2024-02-15"}],
        "temperatures": [
            {"date": "2024-03-02", "temp": 36.35},
            {"date": "2024-03-14", "temp": 36.8},
        ],
        "symptoms": [{"date": "2024-02-26", "items": ["cramps", "fatigue"]}],
        "notes": [{"date": "2024-02-26", "text": "Heavy first day"}],
    }


@pytest.fixture
def history_store(history_payload: dict) -> CycleLogStore:
    return CycleLogStore.parse(json.dumps(history_payload))


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()
