"""Logging configuration for personal-blog.

TWO AUDIENCES, TWO FORMATTERS
-------------------------------
  _ContainerFormatter: human-readable, single-line.
    Every line starts with an ISO-8601 timestamp, so the first ten
    characters are always the calendar day (2024-01-01...).  The log
    export tasks in personal_blog/services/log_tasks.py rely on that: they pick
    the lines for a day with a plain prefix match.

  _JsonFormatter: machine-parseable, for production stdout.
    Log aggregation systems (ELK, Datadog, CloudWatch Logs) parse JSON
    natively, so request_id / path / status_code become filterable
    fields instead of something you regex out of a string.

    Set LOG_JSON=true in production to switch stdout to JSON output.

THE APPLICATION LOG FILE
--------------------------
Besides stdout, the service writes <LOGS_DIR>/personal-blog.log.  The
file always uses the container format (never JSON) and rolls over at
midnight; yesterday's file becomes personal-blog.log.YYYY-MM-DD.  Those
two files are the raw material for per-day log exports.
"""

from __future__ import annotations

import json
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

APP_LOG_FILENAME = "personal-blog.log"


class _ContainerFormatter(logging.Formatter):
    """Single-line formatter tuned for container stdout and the log file.

    - Always: ISO-8601 timestamp, level, logger name, message
    - WARNING+: appends [filename:lineno] so you can locate the guard clause
    - ERROR/CRITICAL: stack trace included when exc_info is present
      (caller passes exc_info=True or uses logger.exception())
    """

    _BASE_FMT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
    _LOC_SUFFIX = "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt)
        ms = int(record.msecs)
        # Insert .NNN before the timezone offset (last 5 chars: +0000)
        return f"{base[:-5]}.{ms:03d}{base[-5:]}"

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            self._style._fmt = self._BASE_FMT + self._LOC_SUFFIX
        else:
            self._style._fmt = self._BASE_FMT
        return super().format(record)


class _JsonFormatter(logging.Formatter):
    """JSON formatter for machine-parseable log output.

    Each log line is a single JSON object (JSON Lines format).  Extra
    context fields injected by the middleware or the log task workers
    appear as top-level keys.
    """

    _CONTEXT_FIELDS = (
        "request_id",
        "method",
        "path",
        "status_code",
        "duration_ms",
        "task_id",
    )

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in self._CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def _file_handler(logs_dir: Path) -> logging.Handler:
    logs_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        logs_dir / APP_LOG_FILENAME,
        when="midnight",
        encoding="utf-8",
        delay=True,
    )
    # Rotated files are named personal-blog.log.YYYY-MM-DD
    handler.suffix = "%Y-%m-%d"
    handler.setFormatter(_ContainerFormatter())
    return handler


def setup_logging(
    level_name: str,
    *,
    json_format: bool = False,
    logs_dir: Path | None = None,
) -> None:
    """Configure the root logger.

    - Sends everything to stdout (Docker captures stdout/stderr)
    - Applies the appropriate formatter based on json_format
    - Also writes the rotating application log file when logs_dir is given
    - Quiets noisy third-party loggers

    Args:
        level_name: Log level string (debug/info/warning/error)
        json_format: If True, emit JSON lines on stdout.
        logs_dir: Directory for personal-blog.log, or None for stdout only.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    if logs_dir is not None:
        root.addHandler(_file_handler(logs_dir))

    # Keep third-party loggers from flooding at DEBUG
    for name in (
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "httpcore",
        "httpx",
        "sqlalchemy.engine",
    ):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
