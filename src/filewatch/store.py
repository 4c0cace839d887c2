"""SQLite-backed history of classified events, one record per path."""

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Set

from .exceptions import StoreError
from .models import EventKind, FileEvent, QueryCriteria

logger = logging.getLogger(__name__)


class EventStore:
    """
    Persisted event history keyed by file path.

    Saving an event for a path replaces the previous record, so every row
    holds the most recent event for its path.
    """

    def __init__(self, db_path: Path):
        """
        Initialize the store.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._closed = False

        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema."""
        try:
            self._conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                isolation_level=None,  # Autocommit mode
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._conn.executescript("""
                CREATE TABLE IF NOT EXISTS file_events (
                    path TEXT PRIMARY KEY,
                    file_name TEXT NOT NULL,
                    extension TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    timestamp REAL NOT NULL,
                    old_path TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_file_events_kind ON file_events(kind);
                CREATE INDEX IF NOT EXISTS idx_file_events_file_name ON file_events(file_name);
            """)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open event store {self.db_path}: {e}") from e

    def _check_open(self) -> sqlite3.Connection:
        if self._closed or self._conn is None:
            raise StoreError("Event store is closed")
        return self._conn

    @staticmethod
    def _row_params(event: FileEvent) -> tuple:
        return (
            str(event.path),
            event.file_name,
            event.extension,
            event.kind.value,
            event.timestamp,
            str(event.old_path) if event.old_path else None,
        )

    @staticmethod
    def _row_to_event(row: sqlite3.Row) -> FileEvent:
        return FileEvent(
            path=Path(row["path"]),
            kind=EventKind(row["kind"]),
            timestamp=row["timestamp"],
            old_path=Path(row["old_path"]) if row["old_path"] else None,
        )

    def insert(self, event: FileEvent) -> None:
        """
        Save an event, replacing any earlier record for the same path.

        Args:
            event: The event to save
        """
        self.insert_many([event])

    def insert_many(self, events: Iterable[FileEvent]) -> int:
        """
        Save several events in one transaction.

        Later events for a path replace earlier ones.

        Args:
            events: Events in chronological order

        Returns:
            Number of events written
        """
        params = [self._row_params(e) for e in events]
        if not params:
            return 0

        with self._lock:
            conn = self._check_open()
            conn.execute("BEGIN")
            try:
                conn.executemany(
                    """
                    INSERT OR REPLACE INTO file_events
                        (path, file_name, extension, kind, timestamp, old_path)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    params,
                )
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                conn.execute("ROLLBACK")
                raise StoreError(f"Failed to save {len(params)} event(s): {e}") from e

        logger.debug(f"Saved {len(params)} event(s) to {self.db_path}")
        return len(params)

    def query_all_most_recent_per_path(self) -> List[FileEvent]:
        """
        Get the most recent event of every path, ordered by file name.

        Returns:
            List of events
        """
        with self._lock:
            conn = self._check_open()
            try:
                rows = conn.execute(
                    "SELECT * FROM file_events ORDER BY file_name, path"
                ).fetchall()
            except sqlite3.Error as e:
                raise StoreError(f"Failed to query event history: {e}") from e
        return [self._row_to_event(row) for row in rows]

    def existing_paths(self) -> Set[Path]:
        """
        Get the paths whose most recent event is not Deleted.

        Returns:
            Set of paths that exist according to the history
        """
        return {
            event.path
            for event in self.query_all_most_recent_per_path()
            if event.kind != EventKind.DELETED
        }

    def query(self, criteria: Optional[QueryCriteria] = None) -> List[FileEvent]:
        """
        Get events matching the given criteria.

        Args:
            criteria: Filters to apply; None returns everything

        Returns:
            Matching events ordered by file name
        """
        events = self.query_all_most_recent_per_path()
        if criteria is None:
            return events
        return [e for e in events if criteria.matches(e)]

    def count(self) -> int:
        with self._lock:
            conn = self._check_open()
            return conn.execute("SELECT COUNT(*) FROM file_events").fetchone()[0]

    def clear(self) -> int:
        """
        Remove all records.

        Returns:
            Number of records removed
        """
        with self._lock:
            conn = self._check_open()
            try:
                cursor = conn.execute("DELETE FROM file_events")
            except sqlite3.Error as e:
                raise StoreError(f"Failed to clear event history: {e}") from e
            removed = cursor.rowcount

        logger.info(f"Cleared {removed} record(s) from {self.db_path}")
        return removed

    def close(self) -> None:
        """Close the store and release resources."""
        if self._closed:
            return

        self._closed = True
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
