"""Tests for CSV exporter module."""

import csv
from datetime import datetime
from pathlib import Path

from src.filewatch.exporter import CSV_HEADER, CSVExporter
from src.filewatch.models import EventKind, FileEvent


class TestCSVExporter:
    """Tests for CSVExporter class."""

    def test_export_rows(self, tmp_path):
        ts = datetime(2024, 3, 1, 12, 30, 0).timestamp()
        events = [
            FileEvent(path=Path("/d/a.txt"), kind=EventKind.CREATED, timestamp=ts),
            FileEvent(path=Path("/d/README"), kind=EventKind.DELETED, timestamp=ts),
        ]
        output = tmp_path / "out.csv"

        count = CSVExporter().export(events, output)

        with open(output, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert count == 2
        assert rows[0] == CSV_HEADER
        assert rows[1] == ["a.txt", ".txt", "/d/a.txt", "Created", "2024-03-01T12:30:00"]
        assert rows[2] == ["README", "", "/d/README", "Deleted", "2024-03-01T12:30:00"]

    def test_header_only_when_empty(self, tmp_path):
        output = tmp_path / "out.csv"

        count = CSVExporter().export([], output)

        assert count == 0
        assert output.read_text(encoding="utf-8").splitlines() == [",".join(CSV_HEADER)]

    def test_commas_are_quoted(self, tmp_path):
        event = FileEvent(path=Path("/d/a,b.txt"), kind=EventKind.CHANGED)
        output = tmp_path / "out.csv"

        CSVExporter().export([event], output)

        with open(output, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[1][0] == "a,b.txt"
        assert '"a,b.txt"' in output.read_text(encoding="utf-8")

    def test_overwrites_existing_file(self, tmp_path):
        output = tmp_path / "out.csv"
        output.write_text("stale\n")

        CSVExporter().export([], output)

        assert "stale" not in output.read_text(encoding="utf-8")
