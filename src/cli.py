#!/usr/bin/env python3
"""
CLI for watching a directory and working with the event history.

Usage:
    python -m src.cli watch --dir /path/to/folder --ext .txt
    python -m src.cli create notes --dir /path/to/folder --ext .txt
    python -m src.cli history --kind Deleted
    python -m src.cli export events.csv
"""

import argparse
import logging
import signal
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from src.filewatch import (
    ConfigurationError,
    CSVExporter,
    EventKind,
    EventStore,
    FileEvent,
    QueryCriteria,
    SettingsManager,
    WatchConfig,
    WatcherError,
    WatchSession,
)


logger = logging.getLogger("cli")


class GracefulShutdown:
    """Handle graceful shutdown on SIGINT/SIGTERM."""

    def __init__(self):
        self.should_exit = False
        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

    def _handler(self, signum, frame):
        logger.info("Received shutdown signal, stopping...")
        self.should_exit = True


def format_event(event: FileEvent) -> str:
    """Render an event as a single display line."""
    line = f"{event.occurred_at:%Y-%m-%d %H:%M:%S}  {event.kind.value:<8} {event.path}"
    if event.old_path:
        line += f"  (from {event.old_path.name})"
    return line


def _config_from_args(args) -> WatchConfig:
    """Combine environment, remembered settings and command-line options."""
    config = WatchConfig.from_env()
    if getattr(args, "db", None):
        config.db_path = Path(args.db)

    config.db_path.parent.mkdir(parents=True, exist_ok=True)
    SettingsManager(config.db_path).fill_defaults(config)

    if getattr(args, "dir", None):
        config.directory = Path(args.dir).resolve()
    if getattr(args, "ext", None) is not None:
        config.extension = args.ext
    if getattr(args, "debounce", None) is not None:
        config.debounce_ms = args.debounce
    return config


def _criteria_from_args(args) -> QueryCriteria:
    return QueryCriteria(
        name_contains=args.name,
        extension=args.ext,
        kind=EventKind(args.kind) if args.kind else None,
        directory=Path(args.dir).resolve() if args.dir else None,
        start=args.since,
        end=args.until,
    )


def cmd_watch(args):
    """Watch a directory until interrupted."""
    config = _config_from_args(args)

    with WatchSession(config=config) as session:
        try:
            session.start()
        except ConfigurationError as e:
            logger.error(f"Cannot start watching: {e}")
            sys.exit(1)
        except WatcherError as e:
            logger.error(f"Watcher failed to start: {e}")
            sys.exit(1)

        SettingsManager(config.db_path).remember(session.config)

        logger.info(f"Watching: {session.config.directory}")
        logger.info(f"Extension: {session.config.normalized_extension or '(all)'}")
        logger.info(f"Database: {config.db_path}")
        logger.info("Press Ctrl+C to stop")

        shutdown = GracefulShutdown()

        while not shutdown.should_exit:
            event = session.next_event(timeout=0.5)
            if event is not None:
                batch = [event] + session.get_pending_events()
                for e in batch:
                    print(format_event(e), flush=True)
                if args.autosave:
                    session.persist(batch)
                    logger.debug(f"Saved {len(batch)} event(s)")

            if session.terminated:
                logger.error(f"Watch session terminated: {session.last_error}")
                sys.exit(1)

    logger.info("Watcher stopped")


def cmd_create(args):
    """Create a file through the manual injection path."""
    config = _config_from_args(args)

    with WatchSession(config=config) as session:
        try:
            event = session.create_file(args.name)
        except WatcherError as e:
            logger.error(f"Cannot create file: {e}")
            sys.exit(1)

        if event is None:
            print("No event (change suppressed)")
            return
        session.save([event])
        print(format_event(event))


def cmd_history(args):
    """Show persisted history."""
    with EventStore(Path(args.db)) as store:
        events = store.query(_criteria_from_args(args))

    if not events:
        print("No events found.")
        return

    for event in events:
        print(format_event(event))
    print(f"\n{len(events)} event(s)")


def cmd_export(args):
    """Export persisted history to CSV."""
    with EventStore(Path(args.db)) as store:
        events = store.query(_criteria_from_args(args))

    count = CSVExporter().export(events, Path(args.output))
    print(f"Exported {count} row(s) to {args.output}")


def cmd_clear(args):
    """Clear persisted history."""
    with EventStore(Path(args.db)) as store:
        removed = store.clear()
    print(f"Removed {removed} record(s)")


def _iso_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date/time: {value!r}")


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", default=None, help="File name contains (case-insensitive)")
    parser.add_argument("--ext", default=None, help="Extension, e.g. .txt")
    parser.add_argument("--kind", default=None, choices=[k.value for k in EventKind], help="Event kind")
    parser.add_argument("--dir", default=None, help="Directory containing the files")
    parser.add_argument("--since", type=_iso_datetime, default=None, help="Earliest time (ISO format)")
    parser.add_argument("--until", type=_iso_datetime, default=None, help="Latest time (ISO format)")
    parser.add_argument("--db", default="events.db", help="Event database path")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Directory watcher with de-duplicated event classification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Watch a folder for .txt files
  python -m src.cli watch --dir ./documents --ext .txt --autosave

  # Create a file through the application
  python -m src.cli create report --dir ./documents --ext .txt

  # Query and export history
  python -m src.cli history --kind Deleted --since 2024-01-01
  python -m src.cli export events.csv --ext .txt
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Watch command
    watch_parser = subparsers.add_parser("watch", help="Watch a directory")
    watch_parser.add_argument("--dir", default=None, help="Directory to watch (defaults to the last one used)")
    watch_parser.add_argument("--ext", default=None, help="Extension filter, empty for all files")
    watch_parser.add_argument("--debounce", type=int, default=None, help="Debounce window in ms (default: 1000)")
    watch_parser.add_argument("--db", default=None, help="Event database path (default: events.db)")
    watch_parser.add_argument("--autosave", action="store_true", help="Save events to the database as they arrive")
    watch_parser.set_defaults(func=cmd_watch)

    # Create command
    create_parser = subparsers.add_parser("create", help="Create an empty file and record its event")
    create_parser.add_argument("name", help="File name")
    create_parser.add_argument("--dir", default=None, help="Target directory (defaults to the watch directory)")
    create_parser.add_argument("--ext", default=None, help="Extension to append")
    create_parser.add_argument("--db", default=None, help="Event database path (default: events.db)")
    create_parser.set_defaults(func=cmd_create)

    # History command
    history_parser = subparsers.add_parser("history", help="Show recorded events")
    _add_filter_arguments(history_parser)
    history_parser.set_defaults(func=cmd_history)

    # Export command
    export_parser = subparsers.add_parser("export", help="Export recorded events to CSV")
    export_parser.add_argument("output", help="CSV file to write")
    _add_filter_arguments(export_parser)
    export_parser.set_defaults(func=cmd_export)

    # Clear command
    clear_parser = subparsers.add_parser("clear", help="Delete all recorded events")
    clear_parser.add_argument("--db", default="events.db", help="Event database path")
    clear_parser.set_defaults(func=cmd_clear)

    return parser


def main(argv: Optional[List[str]] = None):
    # Load .env from project root
    env_file = Path(__file__).parent.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)
    else:
        load_dotenv()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    args.func(args)


if __name__ == "__main__":
    main()
