"""Operator-initiated file creations routed through the correlator."""

import logging
import time
from pathlib import Path
from typing import Optional

from .correlator import EventCorrelator
from .exceptions import InjectionError
from .models import EventKind, FileEvent, RawNotification

logger = logging.getLogger(__name__)


class ManualEventInjector:
    """
    Feeds manual file creations to the correlator as Created notifications.

    The created path is tracked exactly as if the watcher had observed it,
    so a later external Created for it is classified as Changed.
    """

    def __init__(self, correlator: EventCorrelator):
        self.correlator = correlator

    def inject(self, path: Path) -> Optional[FileEvent]:
        """
        Submit a Created notification for a path created out of band.

        Args:
            path: Path of the created file

        Returns:
            The classified event (Changed if the path was already tracked,
            None if that Changed was debounced)
        """
        raw = RawNotification(
            path=Path(path).resolve(),
            raw_kind=EventKind.CREATED.value,
            raw_timestamp=time.time(),
        )
        return self.correlator.process(raw)

    def create_file(
        self,
        name: str,
        directory: Optional[Path] = None,
        extension: str = "",
    ) -> Optional[FileEvent]:
        """
        Create an empty file and inject its Created event.

        Args:
            name: File name, with or without the extension
            directory: Target directory (created if missing); defaults to the cwd
            extension: Extension to append when name does not already end with it

        Returns:
            The classified event

        Raises:
            InjectionError: If the name is empty or the file cannot be created
        """
        name = (name or "").strip()
        if not name:
            raise InjectionError("A file name is required")

        if extension and not extension.startswith("."):
            extension = f".{extension}"
        if extension and not name.lower().endswith(extension.lower()):
            name = name + extension

        target_dir = Path(directory) if directory else Path.cwd()
        path = (target_dir / name).resolve()

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "wb"):
                pass
        except OSError as e:
            raise InjectionError(f"Cannot create {path}: {e}") from e

        logger.info(f"Created file manually: {path}")
        return self.inject(path)
