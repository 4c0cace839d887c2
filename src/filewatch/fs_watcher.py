"""Raw notification source using the watchdog library."""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from .config import WatchConfig
from .exceptions import SourceError
from .models import EventKind, RawNotification

logger = logging.getLogger(__name__)


class FSEventHandler(FileSystemEventHandler):
    """Handler that converts watchdog file events to RawNotification."""

    def __init__(
        self,
        callback: Callable[[RawNotification], None],
        config: WatchConfig,
    ):
        super().__init__()
        self.callback = callback
        self.config = config

    def _emit(self, kind: EventKind, path: Path, old_path: Optional[Path] = None):
        """Emit a RawNotification to the callback."""
        raw = RawNotification(
            path=path,
            raw_kind=kind.value,
            raw_timestamp=time.time(),
            old_path=old_path,
        )
        self.callback(raw)

    def on_created(self, event):
        if event.is_directory:
            return
        path = Path(event.src_path)
        if self.config.matches(path):
            self._emit(EventKind.CREATED, path)

    def on_deleted(self, event):
        if event.is_directory:
            return
        path = Path(event.src_path)
        if self.config.matches(path):
            self._emit(EventKind.DELETED, path)

    def on_modified(self, event):
        if event.is_directory:
            return
        path = Path(event.src_path)
        if self.config.matches(path):
            self._emit(EventKind.CHANGED, path)

    def on_moved(self, event):
        if event.is_directory:
            return
        src_path = Path(event.src_path)
        dest_path = Path(event.dest_path)
        if self.config.matches(dest_path):
            self._emit(EventKind.RENAMED, dest_path, old_path=src_path)
        elif self.config.matches(src_path):
            # Renamed out of the filter: the watched file is gone
            self._emit(EventKind.DELETED, src_path)


class WatchdogEventSource:
    """
    Watches a single directory (not recursively) with one watchdog observer.

    Starting again replaces the previous target.
    """

    def __init__(self, callback: Callable[[RawNotification], None]):
        """
        Initialize the source.

        Args:
            callback: Called from the observer thread for each raw notification
        """
        self.callback = callback
        self._observer: Optional[Observer] = None
        self._config: Optional[WatchConfig] = None
        self._lock = threading.Lock()

    def start(self, directory: Path, extension: str = "") -> None:
        """
        Start watching a directory, replacing any current target.

        Args:
            directory: Directory to watch
            extension: Extension filter; empty means all files

        Raises:
            SourceError: If the observer cannot be started
        """
        directory = Path(directory).resolve()
        config = WatchConfig(directory=directory, extension=extension)

        observer = Observer()
        handler = FSEventHandler(self.callback, config)
        try:
            observer.schedule(handler, str(directory), recursive=False)
            observer.start()
        except OSError as e:
            raise SourceError(f"Cannot watch {directory}: {e}") from e

        with self._lock:
            previous = self._observer
            self._observer = observer
            self._config = config

        if previous is not None:
            self._dispose(previous)

        logger.info(f"Watching {directory} for {config.normalized_extension or 'all files'}")

    def stop(self, timeout: float = 5.0) -> bool:
        """
        Stop watching.

        Args:
            timeout: Seconds to wait for the observer thread

        Returns:
            True if a watch was stopped, False if none was active
        """
        with self._lock:
            observer = self._observer
            self._observer = None

        if observer is None:
            return False

        self._dispose(observer, timeout)
        return True

    @staticmethod
    def _dispose(observer: Observer, timeout: float = 5.0) -> None:
        observer.stop()
        if observer.is_alive():
            observer.join(timeout=timeout)

    def is_alive(self) -> bool:
        """Check whether the observer thread is running."""
        with self._lock:
            return self._observer is not None and self._observer.is_alive()

    @property
    def is_watching(self) -> bool:
        with self._lock:
            return self._observer is not None

    @property
    def directory(self) -> Optional[Path]:
        with self._lock:
            return self._config.directory if self._config else None

    @property
    def extension(self) -> str:
        with self._lock:
            return self._config.normalized_extension if self._config else ""
