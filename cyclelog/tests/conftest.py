"""Fixtures for the HTTP API tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from cyclelog.config import Settings
from cyclelog.main import create_app


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_file=tmp_path / "cycle_log.json", environment="test")


@pytest.fixture
def seeded_settings(settings: Settings) -> Settings:
    """Settings whose data file already holds three 28-day cycles."""
    settings.data_file.write_text(
        json.dumps(
            {
                "periods": [
                    {"startDate": "2024-01-01", "endDate": "2024-01-05"},
                    {"startDate": "2024-01-29", "endDate": "2024-02-02"},
                    {"startDate": "2024-02-26", "endDate": "2024-03-01"},
                ],
                "symptoms": [{"date": "2024-02-26", "items": ["cramps"]}],
            }
        )
    )
    return settings


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def seeded_client(seeded_settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(seeded_settings)) as test_client:
        yield test_client
