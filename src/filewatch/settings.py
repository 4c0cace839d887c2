"""
Remembered watch target, stored next to the event history in events.db.
"""

import logging
import sqlite3
import time
from contextlib import closing
from pathlib import Path
from typing import Dict, Optional

from .config import WatchConfig

logger = logging.getLogger(__name__)

WATCH_DIRECTORY_KEY = "watch_directory"
EXTENSION_KEY = "extension"


class SettingsManager:
    """
    Key-value settings table in the events database.

    Used to restore the last watched directory and extension filter when
    none is given on the command line.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def _execute(self, sql: str, params: tuple = ()) -> list:
        with closing(sqlite3.connect(str(self.db_path))) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS watch_settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
            """)
            with conn:
                return conn.execute(sql, params).fetchall()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        rows = self._execute("SELECT value FROM watch_settings WHERE key = ?", (key,))
        return rows[0][0] if rows else default

    def set(self, key: str, value: Optional[str]) -> None:
        """Store a value; None removes the key."""
        if value is None:
            self._execute("DELETE FROM watch_settings WHERE key = ?", (key,))
            return
        self._execute(
            "INSERT OR REPLACE INTO watch_settings (key, value, updated_at) VALUES (?, ?, ?)",
            (key, value, time.time()),
        )

    def get_all(self) -> Dict[str, str]:
        return dict(self._execute("SELECT key, value FROM watch_settings ORDER BY key"))

    # --- Watch target ---

    def get_watch_directory(self) -> Optional[Path]:
        value = self.get(WATCH_DIRECTORY_KEY)
        return Path(value) if value else None

    def set_watch_directory(self, directory: Optional[Path]) -> None:
        self.set(WATCH_DIRECTORY_KEY, str(directory) if directory else None)

    def get_extension(self) -> str:
        return self.get(EXTENSION_KEY) or ""

    def set_extension(self, extension: str) -> None:
        self.set(EXTENSION_KEY, extension)

    def remember(self, config: WatchConfig) -> None:
        """Save the directory and extension filter of a started session."""
        self.set_watch_directory(config.directory)
        self.set_extension(config.normalized_extension)
        logger.debug(f"Remembered watch target {config.directory} ({config.normalized_extension or 'all'})")

    def fill_defaults(self, config: WatchConfig) -> WatchConfig:
        """
        Fill an unset directory or extension from the remembered values.

        Args:
            config: Configuration to update in place

        Returns:
            The same configuration
        """
        if config.directory is None:
            config.directory = self.get_watch_directory()
        if not config.extension:
            config.extension = self.get_extension()
        return config
