#!/usr/bin/env python3
"""
Watch session demo.

This example demonstrates:
1. A burst of writes collapsed into a single Changed event
2. A manual creation followed by the watcher seeing the same file
3. Renames, deletions and re-creation of a deleted path
4. Switching the session to another directory while running

Usage:
    python examples/session_demo.py
"""

import shutil
import sys
import tempfile
import threading
import time
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.filewatch import EventKind, WatchConfig, WatchSession


EVENT_ICONS = {
    EventKind.CREATED: "➕",
    EventKind.CHANGED: "📝",
    EventKind.DELETED: "❌",
    EventKind.RENAMED: "📦",
}


def print_events(session: WatchSession, stop_event: threading.Event):
    """Print classified events until asked to stop."""
    while not stop_event.is_set():
        event = session.next_event(timeout=0.2)
        if event is None:
            continue
        print(f"[EVENTS] {EVENT_ICONS[event.kind]} {event.kind.value.upper()}: {event.path.name}")
        if event.old_path:
            print(f"         From: {event.old_path.name}")


def main():
    """Run the demo."""
    print("=" * 60)
    print("File Watcher Session Demo")
    print("=" * 60)

    demo_dir = Path(tempfile.mkdtemp(prefix="filewatch_demo_"))
    folder1 = demo_dir / "folder_1"
    folder2 = demo_dir / "folder_2"
    folder1.mkdir()
    folder2.mkdir()

    print(f"\nDemo directory: {demo_dir}\n")

    config = WatchConfig(
        directory=folder1,
        extension=".txt",
        debounce_ms=500,
        db_path=demo_dir / "events.db",
    )
    stop_event = threading.Event()

    try:
        with WatchSession(config=config) as session:
            printer = threading.Thread(target=print_events, args=(session, stop_event), daemon=True)
            printer.start()

            session.start()
            time.sleep(0.5)

            # === Step 1: Create, then write repeatedly ===
            print("[DEMO] Creating hello.txt and writing to it 5 times...")
            hello = folder1 / "hello.txt"
            for i in range(5):
                hello.write_text(f"Hello #{i}")
                time.sleep(0.05)
            time.sleep(1)

            # === Step 2: Manual creation ===
            print("\n[DEMO] Creating notes.txt through the session...")
            session.create_file("notes")
            time.sleep(1)

            # === Step 3: Filtered file ===
            print("\n[DEMO] Creating data.json (filtered out, no events expected)...")
            (folder1 / "data.json").write_text('{"key": "value"}')
            time.sleep(0.5)

            # === Step 4: Rename ===
            print("\n[DEMO] Renaming notes.txt to todo.txt...")
            (folder1 / "notes.txt").rename(folder1 / "todo.txt")
            time.sleep(0.5)

            # === Step 5: Delete and recreate ===
            print("\n[DEMO] Deleting hello.txt and creating it again...")
            hello.unlink()
            time.sleep(0.3)
            hello.write_text("Back again")
            time.sleep(1)

            # === Step 6: Switch directory ===
            print(f"\n[DEMO] Switching to {folder2}...")
            session.start(directory=folder2)
            time.sleep(0.5)
            (folder1 / "ignored.txt").write_text("old folder, no events expected")
            (folder2 / "final.txt").write_text("Final file")
            time.sleep(1)

            session.stop()
            stop_event.set()
            printer.join(timeout=2)

        print("\n" + "=" * 60)
        print("Demo completed successfully!")
        print("=" * 60)

    except KeyboardInterrupt:
        print("\n\nInterrupted!")
        stop_event.set()

    finally:
        print(f"\nCleaning up demo directory: {demo_dir}")
        shutil.rmtree(demo_dir, ignore_errors=True)


if __name__ == "__main__":
    main()
