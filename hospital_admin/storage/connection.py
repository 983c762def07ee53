"""SQLite connections for the local key-value store."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from hospital_admin.config import STORAGE_PATH

from .schema import SCHEMA


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """Open the store file (the configured one by default) with named-column rows."""
    conn = sqlite3.connect(db_path or STORAGE_PATH)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def transaction(db_path: Path | str | None = None) -> Iterator[sqlite3.Connection]:
    """Connection that commits on success, rolls back on error and always closes."""
    conn = get_connection(db_path)
    try:
        yield conn
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_database(db_path: Path | str | None = None) -> None:
    """Create the kv_store table if the file does not have it yet."""
    with transaction(db_path) as conn:
        conn.executescript(SCHEMA)
