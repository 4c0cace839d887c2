"""Per-path suppression of Changed bursts."""

from pathlib import Path
from typing import Dict, Optional

DEFAULT_WINDOW_MS = 1000


class DebounceGate:
    """
    Remembers when the last Changed event for each path was accepted.

    Timestamps are monotonic seconds. Entries never expire on their own;
    an old entry simply stops suppressing once the window has elapsed.
    Entries are dropped with clear() when the path is deleted.
    """

    def __init__(self, window_ms: int = DEFAULT_WINDOW_MS):
        """
        Initialize the gate.

        Args:
            window_ms: Minimum milliseconds between two accepted Changed events
        """
        self.window_ms = window_ms
        self._last_accepted: Dict[Path, float] = {}

    def should_suppress(self, path: Path, now: float) -> bool:
        """
        Check whether a Changed event for path at time now falls inside the window.

        Args:
            path: Path of the event
            now: Monotonic timestamp in seconds

        Returns:
            True iff an entry exists and fewer than window_ms have elapsed since it
        """
        last = self._last_accepted.get(path)
        if last is None:
            return False
        return (now - last) * 1000.0 < self.window_ms

    def record(self, path: Path, now: float) -> None:
        self._last_accepted[path] = now

    def clear(self, path: Path) -> None:
        self._last_accepted.pop(path, None)

    def last_accepted(self, path: Path) -> Optional[float]:
        return self._last_accepted.get(path)

    def __len__(self) -> int:
        return len(self._last_accepted)
