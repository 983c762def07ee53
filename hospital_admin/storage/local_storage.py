"""Key-value local storage backed by SQLite, holding JSON snapshots."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from .connection import init_database, transaction

logger = logging.getLogger(__name__)

# Values that earlier clients wrote instead of removing the key
_EMPTY_VALUES = {"", "undefined", "null"}


class StorageError(Exception):
    """Raised when the durable store cannot be read or written."""
    pass


class LocalStorage:
    """Durable key-value store addressed by fixed string keys."""

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = db_path
        try:
            init_database(db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize storage: {e}") from e

    def get_item(self, key: str) -> str | None:
        """Get the raw stored string for a key."""
        try:
            with transaction(self.db_path) as conn:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {key}: {e}") from e
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Store a raw string under a key, replacing any previous value."""
        now = datetime.now().isoformat()
        try:
            with transaction(self.db_path) as conn:
                conn.execute(
                    """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                       ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                                      updated_at = excluded.updated_at""",
                    (key, value, now),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    def remove_item(self, key: str) -> None:
        """Remove a key. Removing a missing key is not an error."""
        try:
            with transaction(self.db_path) as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e

    def write_json(self, key: str, data: Any) -> None:
        """Serialize data to JSON and store it."""
        self.set_item(key, json.dumps(data, default=str))

    def read_json(self, key: str, validate: Callable[[Any], bool] | None = None) -> Any | None:
        """
        Read and parse a JSON snapshot.

        Missing, blank, "undefined"/"null", unparsable and invalid-shape values
        are all treated as absent. Corrupted records are cleared. Never raises.
        """
        try:
            stored = self.get_item(key)
        except StorageError:
            logger.exception("Failed to load %s", key)
            return None

        if stored is None:
            logger.debug("No stored data for %s", key)
            return None

        if stored.strip() in _EMPTY_VALUES:
            logger.warning("Invalid stored value for %s, clearing", key)
            self._discard(key)
            return None

        try:
            parsed = json.loads(stored)
        except json.JSONDecodeError as e:
            logger.error("JSON parse error for %s: %s", key, e)
            self._discard(key)
            return None

        if validate is not None and not validate(parsed):
            logger.warning("Invalid data structure for %s, clearing", key)
            self._discard(key)
            return None

        return parsed

    def _discard(self, key: str) -> None:
        """Clear a corrupted record, logging instead of failing."""
        try:
            self.remove_item(key)
        except StorageError:
            logger.exception("Failed to clear corrupted %s", key)
