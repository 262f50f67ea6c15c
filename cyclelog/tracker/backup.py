"""Backup export and import.

The backup file is the same JSON document the store is persisted as.  Saving
the file and asking the user to confirm an import are left to collaborators
supplied by the caller, so this module only decides *what* is written and
*when* a store may be replaced.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from cyclelog.tracker.dates import to_date_string
from cyclelog.tracker.store import CycleLogStore, ImportParseError

logger = logging.getLogger("cyclelog.tracker.backup")

BACKUP_PREFIX = "cycle-tracker-backup"

SaveFile = Callable[[str, bytes], None]
ConfirmImport = Callable[[], bool]


def export_filename(today: date | None = None) -> str:
    """``cycle-tracker-backup-YYYY-MM-DD.json`` for the given (or current) day."""
    return f"{BACKUP_PREFIX}-{to_date_string(today or date.today())}.json"


def export_backup(store: CycleLogStore, save: SaveFile, today: date | None = None) -> str:
    """Serialize ``store`` and hand it to ``save`` as ``(filename, payload)``.

    Returns:
        The filename the backup was offered under.
    """
    filename = export_filename(today)
    payload = store.serialize().encode("utf-8")
    save(filename, payload)
    logger.info("Exported backup %s (%d bytes)", filename, len(payload))
    return filename


def parse_backup(raw_text: str | bytes) -> CycleLogStore:
    """Read a backup file into a new store without touching any existing one.

    Raises:
        ImportParseError: The text is not a valid backup.
    """
    return CycleLogStore.parse(raw_text)


def import_backup(store: CycleLogStore, raw_text: str | bytes, confirm: ConfirmImport) -> bool:
    """Replace ``store`` with the backup in ``raw_text`` once the user agrees.

    The backup is parsed before ``confirm`` is asked, so the user is only
    asked about a file that can actually be imported.

    Returns:
        True if the store was replaced, False if the user declined.

    Raises:
        ImportParseError: The text is not a valid backup; ``store`` is unchanged.
    """
    try:
        imported = parse_backup(raw_text)
    except ImportParseError as exc:
        logger.warning("Backup import rejected: %s", exc)
        raise

    if not confirm():
        logger.info("Backup import cancelled by user")
        return False

    store.replace_with(imported)
    return True
