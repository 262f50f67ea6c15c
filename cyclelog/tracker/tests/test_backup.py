"""Tests for backup export and confirmed import."""

from __future__ import annotations

import json
from datetime import date

import pytest

from cyclelog.tracker.backup import export_backup, export_filename, import_backup, parse_backup
from cyclelog.tracker.store import CycleLogStore, ImportParseError


class TestExport:
    def test_filename_embeds_date(self) -> None:
        assert export_filename(date(2024, 3, 20)) == "cycle-tracker-backup-2024-03-20.json"

    def test_payload_handed_to_save(self, history_store: CycleLogStore) -> None:
        saved: list[tuple[str, bytes]] = []
        filename = export_backup(
            history_store, lambda name, data: saved.append((name, data)), today=date(2024, 3, 20)
        )
        assert filename == "cycle-tracker-backup-2024-03-20.json"
        assert len(saved) == 1
        name, data = saved[0]
        assert name == filename
        assert json.loads(data.decode("utf-8")) == json.loads(history_store.serialize())


class TestImport:
    def test_confirmed_import_replaces_store(
        self, empty_store: CycleLogStore, history_store: CycleLogStore
    ) -> None:
        applied = import_backup(empty_store, history_store.serialize(), confirm=lambda: True)
        assert applied
        assert empty_store.serialize() == history_store.serialize()

    def test_declined_import_changes_nothing(self, history_store: CycleLogStore) -> None:
        before = history_store.serialize()
        applied = import_backup(history_store, '{"periods": []}', confirm=lambda: False)
        assert not applied
        assert history_store.serialize() == before

    def test_parse_error_raised_before_asking(self, history_store: CycleLogStore) -> None:
        asked: list[bool] = []

        def confirm() -> bool:
            asked.append(True)
            return True

        before = history_store.serialize()
        with pytest.raises(ImportParseError):
            import_backup(history_store, "{not json", confirm=confirm)
        assert asked == []
        assert history_store.serialize() == before

    def test_missing_notes_field_imports_empty_notes(
        self, history_store: CycleLogStore, history_payload: dict
    ) -> None:
        del history_payload["notes"]
        import_backup(history_store, json.dumps(history_payload), confirm=lambda: True)
        assert history_store.notes == []
        assert len(history_store.periods) == 3
        assert len(history_store.spotting) == 1
        assert len(history_store.temperatures) == 2
        assert len(history_store.symptoms) == 1

    def test_parse_backup_is_detached(self, history_store: CycleLogStore) -> None:
        copy = parse_backup(history_store.serialize())
        copy.clear_period_data("2024-01-01")
        assert len(history_store.periods) == 3
