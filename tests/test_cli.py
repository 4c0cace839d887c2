"""Tests for the command-line interface."""

import pytest
from pathlib import Path

from src.cli import build_parser, format_event, main
from src.filewatch.models import EventKind, FileEvent
from src.filewatch.settings import SettingsManager
from src.filewatch.store import EventStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FILEWATCH_DIR", "FILEWATCH_EXT", "FILEWATCH_DEBOUNCE_MS", "FILEWATCH_DB"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "events.db"
    with EventStore(path) as store:
        store.insert_many([
            FileEvent(path=tmp_path / "a.txt", kind=EventKind.CREATED),
            FileEvent(path=tmp_path / "b.log", kind=EventKind.DELETED),
        ])
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_watch_arguments(self):
        args = build_parser().parse_args(
            ["watch", "--dir", "/data", "--ext", ".txt", "--debounce", "250", "--autosave"]
        )

        assert args.command == "watch"
        assert args.dir == "/data"
        assert args.ext == ".txt"
        assert args.debounce == 250
        assert args.autosave is True

    def test_history_filters(self):
        args = build_parser().parse_args(
            ["history", "--kind", "Deleted", "--since", "2024-01-01", "--name", "rep"]
        )

        assert args.kind == "Deleted"
        assert args.since.year == 2024
        assert args.name == "rep"
        assert args.db == "events.db"

    def test_invalid_kind_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["history", "--kind", "Moved"])

    def test_invalid_date_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["history", "--since", "yesterday"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestFormatEvent:
    """Tests for event display."""

    def test_plain_event(self):
        line = format_event(FileEvent(path=Path("/d/a.txt"), kind=EventKind.CHANGED))

        assert "Changed" in line
        assert line.endswith("/d/a.txt")

    def test_rename_shows_old_name(self):
        event = FileEvent(
            path=Path("/d/new.txt"),
            kind=EventKind.RENAMED,
            old_path=Path("/d/old.txt"),
        )

        assert format_event(event).endswith("(from old.txt)")


class TestCommands:
    """Tests for running commands through main()."""

    def test_history(self, db_path, capsys):
        main(["history", "--db", str(db_path)])

        out = capsys.readouterr().out
        assert "a.txt" in out
        assert "b.log" in out
        assert "2 event(s)" in out

    def test_history_filtered(self, db_path, capsys):
        main(["history", "--db", str(db_path), "--kind", "Deleted"])

        out = capsys.readouterr().out
        assert "b.log" in out
        assert "a.txt" not in out

    def test_history_empty(self, tmp_path, capsys):
        main(["history", "--db", str(tmp_path / "empty.db")])

        assert "No events found." in capsys.readouterr().out

    def test_export(self, db_path, tmp_path, capsys):
        output = tmp_path / "out.csv"

        main(["export", str(output), "--db", str(db_path), "--ext", ".txt"])

        lines = output.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "FileName,Extension,FilePath,EventType,Timestamp"
        assert len(lines) == 2
        assert lines[1].startswith("a.txt,.txt,")
        assert "Exported 1 row(s)" in capsys.readouterr().out

    def test_clear(self, db_path, capsys):
        main(["clear", "--db", str(db_path)])

        assert "Removed 2 record(s)" in capsys.readouterr().out
        with EventStore(db_path) as store:
            assert store.count() == 0

    def test_create(self, tmp_path, capsys):
        db = tmp_path / "events.db"
        target = tmp_path / "docs"

        main(["create", "report", "--dir", str(target), "--ext", "txt", "--db", str(db)])

        assert (target / "report.txt").exists()
        assert "Created" in capsys.readouterr().out
        with EventStore(db) as store:
            assert store.existing_paths() == {(target / "report.txt").resolve()}

    def test_create_twice_records_change(self, tmp_path, capsys):
        db = tmp_path / "events.db"
        argv = ["create", "report.txt", "--dir", str(tmp_path), "--db", str(db)]

        main(argv)
        main(argv)

        out = capsys.readouterr().out
        assert "Created" in out
        assert "Changed" in out

    def test_watch_missing_directory_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["watch", "--dir", str(tmp_path / "missing"), "--db", str(tmp_path / "events.db")])

        assert exc_info.value.code == 1

    def test_create_uses_remembered_directory(self, tmp_path, capsys):
        db = tmp_path / "events.db"
        target = tmp_path / "remembered"
        target.mkdir()
        settings = SettingsManager(db)
        settings.set_watch_directory(target)
        settings.set_extension(".md")

        main(["create", "todo", "--db", str(db)])

        assert (target / "todo.md").exists()
