"""Watch session orchestrator."""

import dataclasses
import logging
import queue
import threading
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .config import WatchConfig
from .correlator import EventCorrelator
from .exceptions import SourceError
from .fs_watcher import WatchdogEventSource
from .injector import ManualEventInjector
from .models import FileEvent, RawNotification
from .sink import QueueSink
from .store import EventStore

logger = logging.getLogger(__name__)

_STOP = object()


class WatchSession:
    """
    Coordinates the raw source, the correlator, the sink and the history store.

    Raw notifications from the observer thread are put on a channel that a
    single consumer thread feeds to the correlator. Manual creations go to
    the same correlator directly; its lock keeps both paths serialized.
    """

    def __init__(
        self,
        config: Optional[WatchConfig] = None,
        store: Optional[EventStore] = None,
        sink: Optional[QueueSink] = None,
        on_terminated: Optional[Callable[[Exception], None]] = None,
    ):
        """
        Initialize the session and seed the tracker from persisted history.

        Args:
            config: Watch configuration
            store: History store (opened from config.db_path if not given)
            sink: Destination for classified events
            on_terminated: Called when the source dies unexpectedly
        """
        self.config = config or WatchConfig()
        self._owns_store = store is None
        self.store = store if store is not None else EventStore(self.config.db_path)
        self.sink = sink if sink is not None else QueueSink(self.config.sink_max_size)
        self.on_terminated = on_terminated

        self.correlator = EventCorrelator(
            window_ms=self.config.debounce_ms,
            on_event=self.sink.accept,
        )
        self.injector = ManualEventInjector(self.correlator)
        self._source = WatchdogEventSource(self._on_raw)

        self._channel: "queue.Queue" = queue.Queue()
        self._consumer: Optional[threading.Thread] = None
        self._running = False
        self._accepting = False
        self._terminated = threading.Event()
        self.last_error: Optional[Exception] = None
        self._lock = threading.RLock()

        self.reconcile()

    # --- Lifecycle ---

    def start(self, directory: Optional[Path] = None, extension: Optional[str] = None) -> None:
        """
        Start watching, or switch a running session to a new target.

        The configuration is validated first; on error nothing changes,
        including a session that is already running.

        Args:
            directory: Directory to watch (defaults to config.directory)
            extension: Extension filter (defaults to config.extension)

        Raises:
            ConfigurationError: If the directory or filter is invalid
            SourceError: If the observer cannot be started
        """
        directory = Path(directory) if directory is not None else self.config.directory
        candidate = dataclasses.replace(
            self.config,
            directory=directory.resolve() if directory is not None else None,
            extension=extension if extension is not None else self.config.extension,
        )
        candidate.validate()

        with self._lock:
            self._source.start(candidate.directory, candidate.extension)
            self.config = candidate
            self.last_error = None
            self._terminated.clear()

            if not self._running:
                self._channel = queue.Queue()
                self._consumer = threading.Thread(
                    target=self._consumer_loop,
                    args=(self._channel,),
                    name="CorrelatorConsumer",
                    daemon=True,
                )
                self._running = True
                self._consumer.start()

            self._accepting = True

        logger.info(f"Watch session started on {candidate.directory}")

    def stop(self) -> bool:
        """
        Stop watching.

        Safe to call repeatedly and concurrently with in-flight classification.
        The tracker and debounce state are kept for a later start().

        Returns:
            True if a running session was stopped
        """
        with self._lock:
            if not self._running:
                return False
            self._running = False
            self._accepting = False
            consumer = self._consumer
            channel = self._channel
            self._consumer = None
            self._source.stop(timeout=self.config.stop_timeout_s)

        channel.put(_STOP)
        if consumer is not None and consumer is not threading.current_thread():
            consumer.join(timeout=self.config.stop_timeout_s)

        logger.info("Watch session stopped")
        return True

    def close(self) -> None:
        """Stop the session and release resources."""
        self.stop()
        if self._owns_store:
            self.store.close()

    @property
    def is_running(self) -> bool:
        """True while notifications are being accepted."""
        with self._lock:
            return self._running and self._accepting

    @property
    def terminated(self) -> bool:
        """True if the source failed since the last start()."""
        return self._terminated.is_set()

    def wait_terminated(self, timeout: Optional[float] = None) -> bool:
        return self._terminated.wait(timeout)

    # --- Intake ---

    def _on_raw(self, raw: RawNotification) -> None:
        """Observer callback: enqueue and return."""
        if not self._accepting:
            return
        self._channel.put(raw)

    def _consumer_loop(self, channel: "queue.Queue") -> None:
        """Single consumer feeding the correlator."""
        poll_interval = self.config.poll_interval_ms / 1000.0
        logger.debug("Correlator consumer loop started")

        while True:
            try:
                item = channel.get(timeout=poll_interval)
            except queue.Empty:
                self._check_source()
                continue

            if item is _STOP:
                break

            try:
                self.correlator.process(item)
            except Exception as e:
                logger.error(f"Failed to process {item.raw_kind} for {item.path}: {e}")

        logger.debug("Correlator consumer loop stopped")

    def _check_source(self) -> None:
        """Detect an observer that died without stop() being called."""
        with self._lock:
            if not self._accepting or self._source.is_alive():
                return
            error = SourceError(f"Observer for {self.config.directory} stopped unexpectedly")
            self.last_error = error
            self._accepting = False
            self._source.stop(timeout=self.config.stop_timeout_s)
            self._terminated.set()

        logger.error(f"Watch session terminated: {error}")
        if self.on_terminated:
            self.on_terminated(error)

    # --- Manual creations ---

    def inject(self, path: Path) -> Optional[FileEvent]:
        """Route an out-of-band creation through the correlator."""
        return self.injector.inject(path)

    def create_file(
        self,
        name: str,
        directory: Optional[Path] = None,
        extension: Optional[str] = None,
    ) -> Optional[FileEvent]:
        """
        Create an empty file and inject its Created event.

        Args:
            name: File name
            directory: Target directory (defaults to the watched directory)
            extension: Extension to append (defaults to the configured filter)

        Returns:
            The classified event
        """
        return self.injector.create_file(
            name,
            directory if directory is not None else self.config.directory,
            extension if extension is not None else self.config.normalized_extension,
        )

    # --- Consumers ---

    def next_event(self, timeout: Optional[float] = None) -> Optional[FileEvent]:
        """Wait for the next classified event."""
        return self.sink.get(timeout=timeout)

    def get_pending_events(self, max_count: int = 100) -> List[FileEvent]:
        """
        Get classified events without blocking.

        Args:
            max_count: Maximum number of events to return

        Returns:
            Events in classification order
        """
        return self.sink.drain(max_count)

    # --- Persisted history ---

    def reconcile(self) -> None:
        """Rebuild the existence tracker from persisted history."""
        self.correlator.reseed(self.store.existing_paths())

    def persist(self, events: Iterable[FileEvent]) -> int:
        """
        Append events classified by this session to history.

        The tracker already reflects these events, and the consumer may have
        classified newer ones that are not saved yet, so no reconcile happens.

        Args:
            events: Events taken from the sink, in order

        Returns:
            Number of events saved
        """
        return self.store.insert_many(events)

    def save(self, events: Iterable[FileEvent]) -> int:
        """
        Save events to history, then reconcile.

        Args:
            events: Events in chronological order

        Returns:
            Number of events saved
        """
        count = self.store.insert_many(events)
        self.reconcile()
        return count

    def clear_history(self) -> int:
        """
        Remove all persisted history, then reconcile.

        Returns:
            Number of records removed
        """
        removed = self.store.clear()
        self.reconcile()
        return removed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
