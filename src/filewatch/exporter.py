"""CSV export of file events."""

import csv
import logging
from pathlib import Path
from typing import Iterable

from .models import FileEvent

logger = logging.getLogger(__name__)

CSV_HEADER = ["FileName", "Extension", "FilePath", "EventType", "Timestamp"]


class CSVExporter:
    """Writes file events to a CSV file."""

    def export(self, events: Iterable[FileEvent], path: Path) -> int:
        """
        Write events to a CSV file, replacing any existing file.

        Args:
            events: Events to write
            path: Destination file

        Returns:
            Number of rows written (excluding the header)
        """
        path = Path(path)
        count = 0
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            for event in events:
                writer.writerow([
                    event.file_name,
                    event.extension,
                    str(event.path),
                    event.kind.value,
                    event.occurred_at.isoformat(),
                ])
                count += 1

        logger.info(f"Exported {count} event(s) to {path}")
        return count
