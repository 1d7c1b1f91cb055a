"""Device-local persistence for confirmed bookings."""
from __future__ import annotations

import json
import logging
import random
import sqlite3
import string
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import InvalidOperation
from typing import Callable, Dict, Iterator, List, Optional, Protocol

from transferbook import config
from transferbook.errors import PersistenceFailure
from transferbook.models import Booking

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_uppercase + string.digits
_ID_SUFFIX_LENGTH = 5

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS local_storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class StoragePort(Protocol):
    """Key-value slot storage in the style of a browser's ``localStorage``."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class InMemoryStorage:
    def __init__(self, items: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


def get_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Return a SQLite connection using WAL mode for better concurrency."""
    path = db_path or config.DB_PATH
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA journal_mode=WAL;")
    return conn


@contextmanager
def connection_scope(db_path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """Context manager that yields a SQLite connection and closes it afterwards."""
    conn = get_connection(db_path)
    try:
        yield conn
    finally:
        conn.close()


def ensure_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(_SCHEMA_SQL)
    conn.commit()


class SQLiteStorage:
    """Slot storage backed by a ``local_storage`` table in a SQLite file.

    A connection is opened per operation so the storage can be shared across
    Streamlit script runs, which may execute on different threads.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path or config.DB_PATH

    def get_item(self, key: str) -> Optional[str]:
        try:
            with connection_scope(self.db_path) as conn:
                ensure_schema(conn)
                row = conn.execute(
                    "SELECT value FROM local_storage WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Could not read {key!r}: {exc}") from exc
        return None if row is None else row[0]

    def set_item(self, key: str, value: str) -> None:
        try:
            with connection_scope(self.db_path) as conn:
                ensure_schema(conn)
                conn.execute(
                    """
                    INSERT INTO local_storage (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, datetime.now(timezone.utc).isoformat()),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Could not write {key!r}: {exc}") from exc


def generate_booking_id(
    *,
    clock: Callable[[], float] = time.time,
    rng: Optional[random.Random] = None,
) -> str:
    """Return ``BK<epoch millis><5 random alphanumerics>``.

    Uniqueness is probabilistic; there is a single local writer.
    """

    chooser = rng or random
    suffix = "".join(chooser.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"BK{int(clock() * 1000)}{suffix}"


class BookingStore:
    """Append-only list of confirmed bookings kept in a single storage slot."""

    def __init__(self, storage: StoragePort, *, key: str = config.BOOKINGS_KEY) -> None:
        self._storage = storage
        self._key = key

    def _read(self) -> List[Booking]:
        raw = self._storage.get_item(self._key)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
            if not isinstance(entries, list):
                raise ValueError("stored bookings are not a list")
            return [Booking.from_dict(entry) for entry in entries]
        except (ValueError, KeyError, TypeError, InvalidOperation) as exc:
            raise PersistenceFailure(f"Stored bookings are unreadable: {exc}") from exc

    def list_all(self) -> List[Booking]:
        try:
            return self._read()
        except PersistenceFailure:
            logger.exception("Failed to retrieve bookings")
            return []

    def append(self, booking: Booking) -> bool:
        """Persist ``booking`` after every previously stored one.

        Returns ``False`` (after logging) when storage is unavailable; the
        stored list is left as it was.
        """

        try:
            bookings = self._read()
            bookings.append(booking)
            self._storage.set_item(
                self._key, json.dumps([entry.to_dict() for entry in bookings])
            )
        except PersistenceFailure:
            logger.exception("Failed to save booking %s", booking.id)
            return False
        return True

    def new_id(self) -> str:
        return generate_booking_id()


__all__ = [
    "BookingStore",
    "InMemoryStorage",
    "SQLiteStorage",
    "StoragePort",
    "connection_scope",
    "ensure_schema",
    "generate_booking_id",
    "get_connection",
]
