from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it's easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def _parse_int(name: str, raw: str, *, minimum: int) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum} (got {value})")
    return value


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    logs_dir: Path = Path("logs")
    log_to_file: bool = True
    log_task_workers: int = 2
    log_task_delay_seconds: float = 0.0

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    port = _parse_int("PORT", _getenv("PORT", "8000"), minimum=1)
    log_json = _parse_bool("LOG_JSON", _getenv("LOG_JSON", "false"))
    log_to_file = _parse_bool("LOG_TO_FILE", _getenv("LOG_TO_FILE", "true"))
    log_task_workers = _parse_int(
        "LOG_TASK_WORKERS", _getenv("LOG_TASK_WORKERS", "2"), minimum=1
    )

    delay_raw = _getenv("LOG_TASK_DELAY_SECONDS", "0")
    try:
        log_task_delay_seconds = float(delay_raw)
    except ValueError:
        raise ValueError(
            f"LOG_TASK_DELAY_SECONDS must be a number (got {delay_raw!r})"
        ) from None
    if log_task_delay_seconds < 0:
        raise ValueError(
            f"LOG_TASK_DELAY_SECONDS must be >= 0 (got {log_task_delay_seconds})"
        )

    logs_dir = Path(_getenv("LOGS_DIR", "logs") or "logs")
    database_url = _getenv("DATABASE_URL", "") or None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json,
        port=port,
        database_url=database_url,
        logs_dir=logs_dir,
        log_to_file=log_to_file,
        log_task_workers=log_task_workers,
        log_task_delay_seconds=log_task_delay_seconds,
    )


# Module-level singleton so imports are cheap
SETTINGS = load_settings()
