"""Configuration for the filewatch package."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError, DirectoryNotFoundError, InvalidExtensionError


_INVALID_EXTENSION_CHARS = set("/\\*?[]:\"<>| \t")


@dataclass
class WatchConfig:
    """
    Configuration options for a watch session.

    Attributes:
        directory: Directory to watch (not recursive)
        extension: Extension filter such as ".txt"; empty means all files
        debounce_ms: Minimum time between two accepted Changed events for a path
        db_path: Path to the SQLite database holding the event history
        sink_max_size: Maximum number of undelivered events; 0 for unbounded
        poll_interval_ms: How often the consumer loop checks source liveness
        stop_timeout_s: How long stop() waits for observer and consumer threads
    """
    directory: Optional[Path] = None
    extension: str = ""
    debounce_ms: int = 1000
    db_path: Path = field(default_factory=lambda: Path("events.db"))
    sink_max_size: int = 0
    poll_interval_ms: int = 500
    stop_timeout_s: float = 5.0

    def __post_init__(self):
        if isinstance(self.directory, str):
            self.directory = Path(self.directory) if self.directory else None
        if isinstance(self.db_path, str):
            self.db_path = Path(self.db_path)
        self.extension = (self.extension or "").strip()

    @property
    def normalized_extension(self) -> str:
        """The extension filter with a leading dot, or "" for all files."""
        if not self.extension:
            return ""
        return self.extension if self.extension.startswith(".") else f".{self.extension}"

    def validate(self) -> None:
        """
        Check the configuration before a session is started.

        Raises:
            DirectoryNotFoundError: If the directory is unset, missing or not a directory
            InvalidExtensionError: If the extension filter is malformed
            ConfigurationError: If the debounce window is not positive
        """
        if self.directory is None:
            raise DirectoryNotFoundError("No watch directory configured")
        if not self.directory.exists():
            raise DirectoryNotFoundError(f"Watch directory does not exist: {self.directory}")
        if not self.directory.is_dir():
            raise DirectoryNotFoundError(f"Watch path is not a directory: {self.directory}")

        ext = self.normalized_extension
        if ext:
            if ext == "." or any(c in _INVALID_EXTENSION_CHARS for c in ext):
                raise InvalidExtensionError(f"Invalid extension filter: {self.extension!r}")
            if "." in ext[1:]:
                raise InvalidExtensionError(f"Extension filter must be a single suffix: {self.extension!r}")

        if self.debounce_ms <= 0:
            raise ConfigurationError(f"debounce_ms must be positive, got {self.debounce_ms}")

    def matches(self, path: Path) -> bool:
        """
        Check if a path passes the extension filter.

        Args:
            path: Path to check

        Returns:
            True if the filter is empty or the suffix matches (case-insensitive)
        """
        ext = self.normalized_extension
        if not ext:
            return True
        return path.suffix.lower() == ext.lower()

    @classmethod
    def from_env(cls) -> "WatchConfig":
        """Build a configuration from FILEWATCH_* environment variables."""
        config = cls()
        directory = os.environ.get("FILEWATCH_DIR")
        if directory:
            config.directory = Path(directory)
        config.extension = os.environ.get("FILEWATCH_EXT", "").strip()
        debounce = os.environ.get("FILEWATCH_DEBOUNCE_MS")
        if debounce:
            try:
                config.debounce_ms = int(debounce)
            except ValueError:
                raise ConfigurationError(f"FILEWATCH_DEBOUNCE_MS is not an integer: {debounce!r}")
        db_path = os.environ.get("FILEWATCH_DB")
        if db_path:
            config.db_path = Path(db_path)
        return config
