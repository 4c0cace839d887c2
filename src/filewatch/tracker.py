"""Set of paths currently believed to exist."""

from pathlib import Path
from typing import FrozenSet, Iterable, Set


class ExistenceTracker:
    """
    Paths that exist from the application's point of view.

    Seeded from persisted history and kept up to date by the correlator.
    Not locked on its own: the EventCorrelator serializes all access.
    """

    def __init__(self, paths: Iterable[Path] = ()):
        self._paths: Set[Path] = set()
        self.seed(paths)

    def seed(self, paths: Iterable[Path]) -> None:
        """
        Replace the entire tracked set.

        Args:
            paths: Paths that currently exist according to persisted history
        """
        self._paths = {Path(p) for p in paths}

    def contains(self, path: Path) -> bool:
        return path in self._paths

    def add(self, path: Path) -> None:
        self._paths.add(path)

    def remove(self, path: Path) -> None:
        self._paths.discard(path)

    def snapshot(self) -> FrozenSet[Path]:
        """Return an immutable copy of the tracked paths."""
        return frozenset(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: Path) -> bool:
        return self.contains(path)
