"""Background export of one day's application log.

WHY BACKGROUND?
----------------
Scanning the application log for one day's lines can take a while on
large files (LOG_TASK_DELAY_SECONDS can simulate a slow job).  The API
therefore does not build the file inside the request:

  1. POST /api/logs?date=...  → submit() records the task as
     IN_PROGRESS, hands the build to a worker pool and returns the task
     id immediately (202 Accepted).
  2. GET /api/logs/{id}/status  → poll until COMPLETED or FAILED.
  3. GET /api/logs/{id}/download  → fetch the finished file.

TASK LIFECYCLE
---------------
  IN_PROGRESS ──build ok──▶ COMPLETED
       │
       └──exception──▶ FAILED

  A COMPLETED task whose file vanished from disk is downgraded to
  FAILED the next time anyone asks for its status.  Nothing retries
  automatically; submitting again creates a new task.

WHY A THREAD POOL (NOT A BARE THREAD)?
----------------------------------------
Every build is a Future handed to a ThreadPoolExecutor.  The pool
bounds how many builds run at once, shuts down cleanly with the app,
and a done-callback on each Future means no failure goes unlogged.

ARTIFACT LAYOUT
----------------
  <LOGS_DIR>/personal-blog.log              live application log
  <LOGS_DIR>/personal-blog.log.2024-01-01   rotated log for that day
  <LOGS_DIR>/personal-blog-2024-01-01.log   export built by a task

The export holds every line from the two sources that starts with the
requested date, one per row.  It is written to a temporary file and
renamed into place, so a reader never sees a half-written export.
"""

from __future__ import annotations

import datetime
import logging
import os
import re
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from personal_blog.core.logging import APP_LOG_FILENAME
from personal_blog.core.metrics import LOG_TASK_TRANSITIONS, LOG_TASKS_RUNNING
from personal_blog.services.errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

ARTIFACT_PREFIX = "personal-blog-"
ARTIFACT_EXTENSION = ".log"

_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class LogTaskStatus(StrEnum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    NOT_FOUND = "NOT_FOUND"


@dataclass(slots=True)
class LogTask:
    """Tracked state of one export.  Mutated only under the tracker lock."""

    id: str
    date: datetime.date
    artifact_path: Path
    status: LogTaskStatus = LogTaskStatus.IN_PROGRESS


@dataclass(frozen=True, slots=True)
class LogTaskStatusInfo:
    task_id: str
    status: LogTaskStatus
    date: datetime.date | None


@dataclass(frozen=True, slots=True)
class LogArtifact:
    path: Path
    date: datetime.date

    @property
    def download_name(self) -> str:
        return f"log_{self.date.isoformat()}.log"


def parse_log_date(raw: str) -> datetime.date:
    """Parse a YYYY-MM-DD string or raise InvalidInputError."""
    if not _ISO_DATE.fullmatch(raw):
        raise InvalidInputError(
            f"Invalid date format: {raw!r}. Expected format: yyyy-MM-dd"
        )
    try:
        return datetime.date.fromisoformat(raw)
    except ValueError:
        raise InvalidInputError(f"Invalid date: {raw!r}") from None


def artifact_path_for(logs_dir: Path, day: datetime.date) -> Path:
    return logs_dir / f"{ARTIFACT_PREFIX}{day.isoformat()}{ARTIFACT_EXTENSION}"


class LogTaskTracker:
    """Runs log exports on a worker pool and tracks their status by id."""

    def __init__(
        self,
        logs_dir: Path,
        *,
        max_workers: int = 2,
        build_delay_seconds: float = 0.0,
    ) -> None:
        self._logs_dir = logs_dir
        self._build_delay_seconds = build_delay_seconds
        self._tasks: dict[str, LogTask] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="log-task"
        )

    @property
    def logs_dir(self) -> Path:
        return self._logs_dir

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(self, date: str) -> str:
        """Start exporting the log for date.  Returns the task id at once.

        Raises InvalidInputError for a malformed date; no task is created.
        """
        day = parse_log_date(date)
        task = LogTask(
            id=str(uuid.uuid4()),
            date=day,
            artifact_path=artifact_path_for(self._logs_dir, day),
        )

        # The record must be visible to status queries before the build starts
        with self._lock:
            self._tasks[task.id] = task
        LOG_TASK_TRANSITIONS.labels(status=LogTaskStatus.IN_PROGRESS.value).inc()

        try:
            future = self._executor.submit(self._run, task)
        except RuntimeError:
            # Pool already shut down
            self._set_status(task, LogTaskStatus.FAILED)
            raise
        future.add_done_callback(self._on_done)

        logger.info("Log task %s submitted for date=%s", task.id, day.isoformat())
        return task.id

    def get_status(self, task_id: str) -> LogTaskStatusInfo:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return LogTaskStatusInfo(
                    task_id=task_id, status=LogTaskStatus.NOT_FOUND, date=None
                )
            if (
                task.status is LogTaskStatus.COMPLETED
                and not task.artifact_path.exists()
            ):
                task.status = LogTaskStatus.FAILED
                downgraded = True
            else:
                downgraded = False
            info = LogTaskStatusInfo(task_id=task.id, status=task.status, date=task.date)

        if downgraded:
            LOG_TASK_TRANSITIONS.labels(status=LogTaskStatus.FAILED.value).inc()
            logger.warning(
                "Log task %s marked FAILED: %s is missing",
                task_id,
                task.artifact_path,
            )
        return info

    def get_artifact(self, task_id: str) -> LogArtifact:
        """Return the finished export for task_id.

        Raises NotFoundError when the task is unknown or the file is
        missing or empty.
        """
        with self._lock:
            task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("Log task not found")

        try:
            size = task.artifact_path.stat().st_size
        except FileNotFoundError:
            size = 0
        if size == 0:
            raise NotFoundError("Log file not found or empty")

        return LogArtifact(path=task.artifact_path, date=task.date)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def _set_status(self, task: LogTask, status: LogTaskStatus) -> None:
        with self._lock:
            task.status = status
        LOG_TASK_TRANSITIONS.labels(status=status.value).inc()

    def _run(self, task: LogTask) -> None:
        LOG_TASKS_RUNNING.inc()
        try:
            self._build(task)
        except Exception:
            self._set_status(task, LogTaskStatus.FAILED)
            logger.exception(
                "Log task %s failed for date=%s",
                task.id,
                task.date.isoformat(),
                extra={"task_id": task.id},
            )
        else:
            self._set_status(task, LogTaskStatus.COMPLETED)
            logger.info(
                "Log task %s completed: %s",
                task.id,
                task.artifact_path,
                extra={"task_id": task.id},
            )
        finally:
            LOG_TASKS_RUNNING.dec()

    def _build(self, task: LogTask) -> None:
        if self._build_delay_seconds:
            time.sleep(self._build_delay_seconds)

        if task.artifact_path.exists():
            logger.debug("Reusing existing export %s", task.artifact_path)
            return

        entries = self._collect_entries(task.date)
        self._write_artifact(task, entries)

    def _collect_entries(self, day: datetime.date) -> list[str]:
        prefix = day.isoformat()
        sources = (
            self._logs_dir / APP_LOG_FILENAME,
            self._logs_dir / f"{APP_LOG_FILENAME}.{prefix}",
        )
        entries: list[str] = []
        for source in sources:
            if not source.is_file():
                continue
            with source.open(encoding="utf-8", errors="replace") as fh:
                entries.extend(
                    line.rstrip("\r\n") for line in fh if line.startswith(prefix)
                )
        return entries

    def _write_artifact(self, task: LogTask, entries: list[str]) -> None:
        task.artifact_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = task.artifact_path.with_name(
            f"{task.artifact_path.name}.{task.id}.tmp"
        )
        try:
            with tmp_path.open("w", encoding="utf-8") as fh:
                for entry in entries:
                    fh.write(entry + "\n")
            os.replace(tmp_path, task.artifact_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    def _on_done(self, future: Future[None]) -> None:
        if future.cancelled():
            logger.warning("Log task future was cancelled before it ran")
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Unhandled error in log task worker", exc_info=exc)
