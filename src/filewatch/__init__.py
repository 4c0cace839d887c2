"""
File Watch Package

Watches a single directory and turns noisy raw file system notifications
into one authoritative event per logical change.

Features:
- Created/Changed/Deleted/Renamed classification
- Reclassification of Created for files already known to exist
- Per-path debounce of Changed bursts
- Manual file creation through the same classification path
- Existence state seeded from persisted history
- SQLite event history with query and CSV export
"""

from .models import (
    EventKind,
    RawNotification,
    FileEvent,
    QueryCriteria,
)

from .config import WatchConfig

from .exceptions import (
    WatcherError,
    ConfigurationError,
    DirectoryNotFoundError,
    InvalidExtensionError,
    SourceError,
    StoreError,
    InjectionError,
)

from .tracker import ExistenceTracker
from .debounce import DebounceGate
from .correlator import EventCorrelator
from .injector import ManualEventInjector
from .sink import QueueSink
from .store import EventStore
from .settings import SettingsManager
from .exporter import CSVExporter
from .fs_watcher import WatchdogEventSource, FSEventHandler
from .session import WatchSession


__all__ = [
    # Models
    "EventKind",
    "RawNotification",
    "FileEvent",
    "QueryCriteria",
    # Config
    "WatchConfig",
    # Exceptions
    "WatcherError",
    "ConfigurationError",
    "DirectoryNotFoundError",
    "InvalidExtensionError",
    "SourceError",
    "StoreError",
    "InjectionError",
    # Components
    "ExistenceTracker",
    "DebounceGate",
    "EventCorrelator",
    "ManualEventInjector",
    "QueueSink",
    "EventStore",
    "SettingsManager",
    "CSVExporter",
    "WatchdogEventSource",
    "FSEventHandler",
    # Session
    "WatchSession",
]

__version__ = "0.1.0"
