"""Tests for filesystem watcher module."""

import pytest
import time
import threading
from pathlib import Path

from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from src.filewatch.config import WatchConfig
from src.filewatch.exceptions import SourceError
from src.filewatch.fs_watcher import FSEventHandler, WatchdogEventSource
from src.filewatch.models import EventKind


class TestFSEventHandler:
    """Tests for FSEventHandler class."""

    def test_created_mapped(self, tmp_path):
        events = []
        handler = FSEventHandler(events.append, WatchConfig(extension=".txt"))

        handler.on_created(FileCreatedEvent(str(tmp_path / "a.txt")))

        assert len(events) == 1
        assert events[0].raw_kind == EventKind.CREATED.value
        assert events[0].path == tmp_path / "a.txt"

    def test_modified_mapped_to_changed(self, tmp_path):
        events = []
        handler = FSEventHandler(events.append, WatchConfig())

        handler.on_modified(FileModifiedEvent(str(tmp_path / "a.txt")))

        assert events[0].raw_kind == EventKind.CHANGED.value

    def test_deleted_mapped(self, tmp_path):
        events = []
        handler = FSEventHandler(events.append, WatchConfig())

        handler.on_deleted(FileDeletedEvent(str(tmp_path / "a.txt")))

        assert events[0].raw_kind == EventKind.DELETED.value

    def test_directory_events_ignored(self, tmp_path):
        events = []
        handler = FSEventHandler(events.append, WatchConfig())

        handler.on_created(DirCreatedEvent(str(tmp_path / "sub")))

        assert events == []

    def test_extension_filter(self, tmp_path):
        events = []
        handler = FSEventHandler(events.append, WatchConfig(extension="txt"))

        handler.on_created(FileCreatedEvent(str(tmp_path / "a.log")))
        handler.on_created(FileCreatedEvent(str(tmp_path / "b.TXT")))

        assert [e.path.name for e in events] == ["b.TXT"]

    def test_move_mapped_to_renamed(self, tmp_path):
        events = []
        handler = FSEventHandler(events.append, WatchConfig(extension=".txt"))

        handler.on_moved(FileMovedEvent(str(tmp_path / "old.txt"), str(tmp_path / "new.txt")))

        assert events[0].raw_kind == EventKind.RENAMED.value
        assert events[0].path == tmp_path / "new.txt"
        assert events[0].old_path == tmp_path / "old.txt"

    def test_move_out_of_filter_is_deleted(self, tmp_path):
        events = []
        handler = FSEventHandler(events.append, WatchConfig(extension=".txt"))

        handler.on_moved(FileMovedEvent(str(tmp_path / "a.txt"), str(tmp_path / "a.bak")))

        assert len(events) == 1
        assert events[0].raw_kind == EventKind.DELETED.value
        assert events[0].path == tmp_path / "a.txt"

    def test_move_outside_filter_ignored(self, tmp_path):
        events = []
        handler = FSEventHandler(events.append, WatchConfig(extension=".txt"))

        handler.on_moved(FileMovedEvent(str(tmp_path / "a.log"), str(tmp_path / "b.log")))

        assert events == []


class TestWatchdogEventSource:
    """Tests for WatchdogEventSource class."""

    def test_start_and_stop(self, tmp_path):
        source = WatchdogEventSource(lambda raw: None)

        source.start(tmp_path, ".txt")

        assert source.is_watching
        assert source.is_alive()
        assert source.directory == tmp_path.resolve()
        assert source.extension == ".txt"

        assert source.stop() is True
        assert not source.is_watching
        assert not source.is_alive()

    def test_stop_not_watching(self):
        source = WatchdogEventSource(lambda raw: None)
        assert source.stop() is False

    def test_stop_twice(self, tmp_path):
        source = WatchdogEventSource(lambda raw: None)
        source.start(tmp_path)

        assert source.stop() is True
        assert source.stop() is False

    def test_start_missing_directory(self, tmp_path):
        source = WatchdogEventSource(lambda raw: None)

        with pytest.raises(SourceError):
            source.start(tmp_path / "missing")

        assert not source.is_watching

    def test_restart_swaps_target(self, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()

        events = []
        lock = threading.Lock()

        def callback(raw):
            with lock:
                events.append(raw)

        source = WatchdogEventSource(callback)
        source.start(first)
        source.start(second)

        assert source.directory == second.resolve()

        time.sleep(0.2)

        (first / "ignored.txt").write_text("old target")
        (second / "seen.txt").write_text("new target")

        time.sleep(0.5)

        source.stop()

        with lock:
            names = {e.path.name for e in events}

        assert "seen.txt" in names
        assert "ignored.txt" not in names

    def test_detects_file_creation(self, tmp_path):
        events = []
        lock = threading.Lock()

        def callback(raw):
            with lock:
                events.append(raw)

        source = WatchdogEventSource(callback)
        source.start(tmp_path, ".txt")

        # Give watcher time to start
        time.sleep(0.2)

        (tmp_path / "test.txt").write_text("hello")
        (tmp_path / "test.log").write_text("filtered")

        time.sleep(0.5)

        source.stop()

        with lock:
            created = [e for e in events if e.raw_kind == "Created" and e.path.name == "test.txt"]
            logs = [e for e in events if e.path.suffix == ".log"]

        assert len(created) >= 1
        assert logs == []

    def test_detects_file_deletion(self, tmp_path):
        test_file = tmp_path / "test.txt"
        test_file.write_text("to be deleted")

        events = []
        lock = threading.Lock()

        def callback(raw):
            with lock:
                events.append(raw)

        source = WatchdogEventSource(callback)
        source.start(tmp_path)

        time.sleep(0.2)

        test_file.unlink()

        time.sleep(0.5)

        source.stop()

        with lock:
            deleted = [e for e in events if e.raw_kind == "Deleted" and e.path.name == "test.txt"]

        assert len(deleted) >= 1

    def test_does_not_watch_subdirectories(self, tmp_path):
        subdir = tmp_path / "subdir"
        subdir.mkdir()

        events = []
        lock = threading.Lock()

        def callback(raw):
            with lock:
                events.append(raw)

        source = WatchdogEventSource(callback)
        source.start(tmp_path)

        time.sleep(0.2)

        (subdir / "nested.txt").write_text("nested content")

        time.sleep(0.5)

        source.stop()

        with lock:
            nested = [e for e in events if e.path.name == "nested.txt"]

        assert nested == []
