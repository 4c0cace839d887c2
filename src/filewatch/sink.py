"""Non-blocking delivery of classified events to consumers."""

import logging
import queue
import threading
from typing import List, Optional

from .models import FileEvent

logger = logging.getLogger(__name__)


class QueueSink:
    """
    Thread-safe FIFO of classified events.

    accept() only enqueues, so a slow consumer never stalls classification.
    A bounded sink drops events it has no room for and counts them.
    """

    def __init__(self, max_size: int = 0):
        """
        Initialize the sink.

        Args:
            max_size: Maximum number of undelivered events; 0 for unbounded
        """
        self.max_size = max_size
        self._queue: "queue.Queue[FileEvent]" = queue.Queue(maxsize=max_size)
        self._dropped = 0
        self._lock = threading.Lock()

    def accept(self, event: FileEvent) -> None:
        """
        Enqueue an event without blocking.

        Args:
            event: The classified event
        """
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            with self._lock:
                self._dropped += 1
            logger.warning(f"Event sink full ({self.max_size}), dropped {event.kind.value}: {event.path}")

    def get(self, timeout: Optional[float] = None) -> Optional[FileEvent]:
        """
        Wait for the next event.

        Args:
            timeout: Seconds to wait; None blocks until an event arrives

        Returns:
            The next event, or None on timeout
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self, max_count: int = 100) -> List[FileEvent]:
        """
        Take up to max_count events without blocking.

        Args:
            max_count: Maximum number of events to return

        Returns:
            Events in arrival order
        """
        events = []
        while len(events) < max_count:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return events

    def size(self) -> int:
        return self._queue.qsize()

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    def __len__(self) -> int:
        return self.size()
