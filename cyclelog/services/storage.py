"""Durable local storage for the serialized cycle log.

The whole log is one JSON document, rewritten after every change.  Writes go
to a sibling temp file first and are moved into place with ``os.replace`` so
a crash mid-write never leaves a truncated log behind.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from cyclelog.config import Settings, get_settings

logger = logging.getLogger("cyclelog.storage")


class StorageError(RuntimeError):
    """Raised when the cycle log cannot be written."""


class CycleLogStorage(Protocol):
    def load(self) -> str | None: ...

    def save(self, payload: str) -> None: ...


class JsonFileStorage:
    """Keep the serialized cycle log in a single file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> str | None:
        """Return the stored document, or None if there is nothing usable.

        A missing or unreadable file is not an error: the app starts empty.
        """
        if not self.path.exists():
            logger.info("No cycle log at %s yet", self.path)
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read cycle log %s: %s", self.path, exc)
            return None

    def save(self, payload: str) -> None:
        """Atomically replace the stored document.

        Raises:
            StorageError: The file could not be written.
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorageError(f"Could not write cycle log to {self.path}: {exc}") from exc
        logger.debug("Saved cycle log (%d chars) to %s", len(payload), self.path)


class MemoryStorage:
    """Keep every saved document in memory; nothing survives the process."""

    def __init__(self, initial: str | None = None) -> None:
        self.saved: list[str] = []
        self._initial = initial

    def load(self) -> str | None:
        return self.saved[-1] if self.saved else self._initial

    def save(self, payload: str) -> None:
        self.saved.append(payload)


def get_storage(settings: Settings | None = None) -> JsonFileStorage:
    s = settings or get_settings()
    return JsonFileStorage(s.data_file)
