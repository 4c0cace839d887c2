"""Classification of raw notifications into authoritative file events."""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, FrozenSet, Iterable, Optional

from .debounce import DEFAULT_WINDOW_MS, DebounceGate
from .models import EventKind, FileEvent, RawNotification
from .tracker import ExistenceTracker

logger = logging.getLogger(__name__)


class EventCorrelator:
    """
    Turns raw notifications into at most one classified FileEvent each.

    Rules, applied per notification for path p:
    - Created for a tracked p is reclassified as Changed; otherwise p is
      tracked and Created is emitted without debounce.
    - Changed is emitted unless the debounce gate suppresses it; an
      emitted Changed also tracks p.
    - Deleted is always emitted; p is untracked and its gate entry cleared.
    - Renamed is always emitted; the new path is tracked.
    - Unknown kinds are handled as Changed.

    Paths are resolved before lookup, so a symlinked or unnormalized
    spelling of a watched file shares state with the one the observer reports.
    The tracker and gate are only touched while holding a single lock, so
    each notification is classified, applied and emitted atomically.
    """

    def __init__(
        self,
        tracker: Optional[ExistenceTracker] = None,
        gate: Optional[DebounceGate] = None,
        on_event: Optional[Callable[[FileEvent], None]] = None,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the correlator.

        Args:
            tracker: Existence tracker (a new empty one if not given)
            gate: Debounce gate (a new one with window_ms if not given)
            on_event: Callback receiving each classified event; must not block
            window_ms: Debounce window used when no gate is given
            clock: Monotonic clock used for debounce when process() gets no now
        """
        self._tracker = tracker if tracker is not None else ExistenceTracker()
        self._gate = gate if gate is not None else DebounceGate(window_ms)
        self.on_event = on_event
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def window_ms(self) -> int:
        return self._gate.window_ms

    def process(self, raw: RawNotification, now: Optional[float] = None) -> Optional[FileEvent]:
        """
        Classify a raw notification.

        Args:
            raw: The notification to classify
            now: Monotonic time in seconds for debounce (defaults to the clock)

        Returns:
            The emitted event, or None if the notification was suppressed
        """
        with self._lock:
            if now is None:
                now = self._clock()
            event = self._classify(raw, now)
            if event is not None:
                logger.debug(f"Classified {raw.raw_kind} as {event.kind.value}: {event.path}")
                if self.on_event:
                    self.on_event(event)
            return event

    def _classify(self, raw: RawNotification, now: float) -> Optional[FileEvent]:
        path = Path(raw.path).resolve()
        kind = EventKind.parse(raw.raw_kind)

        if kind is None:
            logger.warning(f"Unknown notification kind {raw.raw_kind!r} for {path}, treating as Changed")
            kind = EventKind.CHANGED

        if kind == EventKind.CREATED:
            if self._tracker.contains(path):
                kind = EventKind.CHANGED
            else:
                self._tracker.add(path)
                return FileEvent(path=path, kind=EventKind.CREATED)

        if kind == EventKind.CHANGED:
            if self._gate.should_suppress(path, now):
                logger.debug(f"Suppressed Changed within {self.window_ms}ms: {path}")
                return None
            self._gate.record(path, now)
            self._tracker.add(path)
            return FileEvent(path=path, kind=EventKind.CHANGED)

        if kind == EventKind.DELETED:
            self._tracker.remove(path)
            self._gate.clear(path)
            return FileEvent(path=path, kind=EventKind.DELETED)

        # Renamed: the new path joins the tracked universe
        self._tracker.add(path)
        old_path = Path(raw.old_path).resolve() if raw.old_path else None
        return FileEvent(path=path, kind=EventKind.RENAMED, old_path=old_path)

    def reseed(self, paths: Iterable[Path]) -> None:
        """
        Rebuild the existence tracker from persisted history.

        Args:
            paths: Paths whose most recent persisted kind is not Deleted
        """
        paths = [Path(p).resolve() for p in paths]
        with self._lock:
            self._tracker.seed(paths)
        logger.info(f"Existence tracker reseeded with {len(paths)} path(s)")

    def is_tracked(self, path: Path) -> bool:
        path = Path(path).resolve()
        with self._lock:
            return self._tracker.contains(path)

    def tracked_paths(self) -> FrozenSet[Path]:
        with self._lock:
            return self._tracker.snapshot()
