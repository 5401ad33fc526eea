"""Polling directory watcher feeding the ingestion queue.

Responsibilities:
- Detect files added to the upload directory between polls.
- Ignore the pipeline's own audio output and hidden files.
- Forget removed files so re-adding a file re-triggers processing.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from ..telemetry.logger import RunLogger


class DirectoryWatcher:
    """Report newly added files under one directory by periodic scanning."""

    def __init__(
        self,
        directory: Path,
        on_added: Callable[[Path], object],
        ignored_suffixes: Iterable[str] = (),
        poll_interval_seconds: float = 1.0,
        ignore_initial: bool = False,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize watch target, callback, and polling policy."""

        self.directory = directory
        self.on_added = on_added
        self.ignored_suffixes = frozenset(suffix.lower() for suffix in ignored_suffixes)
        self.poll_interval_seconds = poll_interval_seconds
        self.ignore_initial = ignore_initial
        self._run_logger = run_logger
        self._known: set[Path] = set()
        self._initialized = False

    def is_ignored(self, path: Path) -> bool:
        """Return whether a path must never be reported."""

        if path.name.startswith("."):
            return True
        return path.suffix.lower() in self.ignored_suffixes

    def scan(self) -> list[Path]:
        """Run one poll and report files not seen by the previous poll."""

        current = self._list_files()
        added = [path for path in current if path not in self._known]
        self._known = set(current)
        if not self._initialized:
            self._initialized = True
            if self.ignore_initial:
                return []
        for path in added:
            if self._run_logger is not None:
                self._run_logger.emit("INFO", "file_added", "watch", path=path)
            self.on_added(path)
        return added

    def run(self, stop_event: threading.Event) -> None:
        """Poll until `stop_event` is set, logging and surviving scan errors."""

        while not stop_event.is_set():
            try:
                self.scan()
            except OSError as exc:
                if self._run_logger is not None:
                    self._run_logger.log_stage_failure(
                        "watch", type(exc).__name__, directory=self.directory
                    )
            stop_event.wait(self.poll_interval_seconds)

    def _list_files(self) -> list[Path]:
        """List watchable files ordered by modification time, then name."""

        entries: list[tuple[float, str, Path]] = []
        for path in self.directory.rglob("*"):
            if self.is_ignored(path):
                continue
            try:
                if not path.is_file():
                    continue
                modified_at = path.stat().st_mtime
            except OSError:
                continue
            entries.append((modified_at, str(path), path))
        entries.sort()
        return [path for _, _, path in entries]
