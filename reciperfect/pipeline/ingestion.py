"""Single-worker ingestion queue for uploaded files.

Responsibilities:
- Deduplicate enqueues of paths that are already queued or processing.
- Hand files to the file processor strictly one at a time in FIFO order.
- Isolate per-file failures so one bad file never blocks the queue.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable
from pathlib import Path

from ..errors import PipelineStageError
from ..models.datatypes import FileTask, FileTaskStatus
from ..telemetry.logger import RunLogger


class IngestionQueue:
    """FIFO queue of `FileTask` records drained by one logical worker."""

    def __init__(
        self,
        process_file: Callable[[Path], object],
        run_logger: RunLogger | None = None,
        clock: Callable[[], float] = time.time,
        history_limit: int = 100,
    ) -> None:
        """Initialize the queue around a synchronous per-file processing callable."""

        self._process_file = process_file
        self._run_logger = run_logger
        self._clock = clock
        self._condition = threading.Condition()
        self._pending: deque[FileTask] = deque()
        self._active: dict[Path, FileTask] = {}
        self._stopped = False
        self.history: deque[FileTask] = deque(maxlen=history_limit)

    @property
    def pending_count(self) -> int:
        """Return the number of queued, not yet processing, tasks."""

        with self._condition:
            return len(self._pending)

    @property
    def is_stopped(self) -> bool:
        """Return whether `stop()` was requested."""

        with self._condition:
            return self._stopped

    def status(self, path: Path) -> FileTaskStatus | None:
        """Return the status of an active task for `path`, if any."""

        with self._condition:
            task = self._active.get(self._key(path))
            return task.status if task is not None else None

    def enqueue(self, path: Path) -> bool:
        """Add `path` unless a queued or processing task already exists for it."""

        key = self._key(path)
        with self._condition:
            existing = self._active.get(key)
            if existing is not None and existing.is_active:
                self._log("INFO", "duplicate_skipped", path=key, status=existing.status.value)
                return False
            task = FileTask(path=key, enqueued_at=self._clock())
            self._active[key] = task
            self._pending.append(task)
            self._condition.notify()
        self._log("INFO", "enqueued", path=key)
        return True

    def process_next(self, timeout: float | None = None) -> FileTask | None:
        """Wait for the oldest task, process it, and return the finished task.

        Returns `None` when nothing arrived within `timeout` or the queue was
        stopped while waiting.
        """

        with self._condition:
            if not self._condition.wait_for(
                lambda: bool(self._pending) or self._stopped, timeout=timeout
            ):
                return None
            if not self._pending:
                return None
            task = self._pending.popleft()
            task.status = FileTaskStatus.PROCESSING

        self._log("INFO", "start", path=task.path)
        try:
            self._process_file(task.path)
        except Exception as exc:
            task.status = FileTaskStatus.FAILED
            task.error_detail = exc.detail if isinstance(exc, PipelineStageError) else str(exc)
            failed_stage = exc.stage if isinstance(exc, PipelineStageError) else "unknown"
            self._log(
                "ERROR",
                "failed",
                path=task.path,
                failed_stage=failed_stage,
                error_type=type(exc).__name__,
            )
        else:
            task.status = FileTaskStatus.DONE
            self._log("INFO", "done", path=task.path)

        with self._condition:
            self._active.pop(task.path, None)
            self.history.append(task)
        return task

    def run(self, stop_event: threading.Event | None = None, poll_interval: float = 0.5) -> None:
        """Drain the queue until stopped; an in-flight file always finishes."""

        while not self.is_stopped and not (stop_event is not None and stop_event.is_set()):
            self.process_next(timeout=poll_interval)

    def stop(self) -> None:
        """Request the worker loop to exit after the in-flight file."""

        with self._condition:
            self._stopped = True
            self._condition.notify_all()

    @staticmethod
    def _key(path: Path) -> Path:
        """Return the normalized path used as the task key."""

        return Path(path).absolute()

    def _log(self, level: str, event: str, **context: object) -> None:
        """Emit one queue event when a logger is configured."""

        if self._run_logger is not None:
            self._run_logger.emit(level, event, "queue", **context)
