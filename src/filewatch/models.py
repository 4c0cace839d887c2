"""Data models for the filewatch package."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional
import time


class EventKind(Enum):
    """Kinds of classified file events."""
    CREATED = "Created"
    CHANGED = "Changed"
    DELETED = "Deleted"
    RENAMED = "Renamed"

    @classmethod
    def parse(cls, raw_kind: Optional[str]) -> Optional["EventKind"]:
        """
        Map a raw kind string to an EventKind.

        Accepts the kind names themselves (case-insensitive) as well as the
        watchdog vocabulary (created, modified, deleted, moved).

        Args:
            raw_kind: Kind as reported by a notification source

        Returns:
            The matching EventKind, or None if the kind is not recognised
        """
        if not raw_kind:
            return None
        return _RAW_KIND_ALIASES.get(raw_kind.strip().lower())


_RAW_KIND_ALIASES = {
    "created": EventKind.CREATED,
    "changed": EventKind.CHANGED,
    "modified": EventKind.CHANGED,
    "deleted": EventKind.DELETED,
    "renamed": EventKind.RENAMED,
    "moved": EventKind.RENAMED,
}


@dataclass(frozen=True)
class RawNotification:
    """
    Unprocessed notification from a file system source.

    Attributes:
        path: Absolute path the notification is about (the new path for renames)
        raw_kind: Kind string as reported by the source, pre-classification
        raw_timestamp: Unix timestamp reported with the notification
        old_path: For renames, the previous path
    """
    path: Path
    raw_kind: str
    raw_timestamp: float = field(default_factory=time.time)
    old_path: Optional[Path] = None


@dataclass(frozen=True)
class FileEvent:
    """
    A single classified file event.

    Attributes:
        path: Full absolute path of the file (identity key)
        kind: Classified kind (Created, Changed, Deleted, Renamed)
        timestamp: Unix timestamp of classification
        old_path: For Renamed events, the previous path if known
    """
    path: Path
    kind: EventKind
    timestamp: float = field(default_factory=time.time)
    old_path: Optional[Path] = None

    def __post_init__(self):
        if not self.path.is_absolute():
            raise ValueError(f"path must be absolute: {self.path}")
        if self.old_path is not None and not self.old_path.is_absolute():
            raise ValueError(f"old_path must be absolute: {self.old_path}")

    @property
    def file_name(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        return self.path.suffix

    @property
    def occurred_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "path": str(self.path),
            "file_name": self.file_name,
            "extension": self.extension,
            "kind": self.kind.value,
            "timestamp": self.timestamp,
            "old_path": str(self.old_path) if self.old_path else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FileEvent":
        """Create from dictionary."""
        return cls(
            path=Path(data["path"]),
            kind=EventKind(data["kind"]),
            timestamp=data.get("timestamp", time.time()),
            old_path=Path(data["old_path"]) if data.get("old_path") else None,
        )


@dataclass
class QueryCriteria:
    """
    Filters applied to persisted event history.

    Empty/None attributes do not filter.

    Attributes:
        name_contains: Case-insensitive substring of the file name
        extension: Exact extension, with or without the leading dot
        kind: Event kind
        directory: Only events for files directly inside this directory
        start: Earliest timestamp (inclusive)
        end: Latest timestamp (inclusive)
    """
    name_contains: Optional[str] = None
    extension: Optional[str] = None
    kind: Optional[EventKind] = None
    directory: Optional[Path] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def matches(self, event: FileEvent) -> bool:
        """Check whether an event satisfies every configured filter."""
        if self.name_contains and self.name_contains.lower() not in event.file_name.lower():
            return False
        if self.extension:
            wanted = self.extension if self.extension.startswith(".") else f".{self.extension}"
            if event.extension.lower() != wanted.lower():
                return False
        if self.kind is not None and event.kind != self.kind:
            return False
        if self.directory is not None and event.path.parent != Path(self.directory):
            return False
        if self.start is not None and event.occurred_at < self.start:
            return False
        if self.end is not None and event.occurred_at > self.end:
            return False
        return True
