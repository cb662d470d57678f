from __future__ import annotations

from pathlib import Path

import pytest

from personal_blog.core.config import AppEnv, Settings, load_settings

_ENV_VARS = (
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
    "PORT",
    "DATABASE_URL",
    "LOGS_DIR",
    "LOG_TO_FILE",
    "LOG_TASK_WORKERS",
    "LOG_TASK_DELAY_SECONDS",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ---- valid values ----


def test_load_settings_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.port == 8000
    assert settings.database_url is None
    assert settings.logs_dir == Path("logs")
    assert settings.log_to_file is True
    assert settings.log_task_workers == 2
    assert settings.log_task_delay_seconds == 0.0


def test_load_settings_respects_env_vars(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("APP_ENV", "prod")
    clean_env.setenv("LOG_LEVEL", "error")
    clean_env.setenv("LOG_JSON", "true")
    clean_env.setenv("PORT", "9000")
    clean_env.setenv("DATABASE_URL", "sqlite:///blog.db")
    clean_env.setenv("LOGS_DIR", "/var/log/blog")
    clean_env.setenv("LOG_TO_FILE", "no")
    clean_env.setenv("LOG_TASK_WORKERS", "4")
    clean_env.setenv("LOG_TASK_DELAY_SECONDS", "20")

    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"
    assert settings.log_json is True
    assert settings.port == 9000
    assert settings.database_url == "sqlite:///blog.db"
    assert settings.logs_dir == Path("/var/log/blog")
    assert settings.log_to_file is False
    assert settings.log_task_workers == 4
    assert settings.log_task_delay_seconds == 20.0


def test_load_settings_normalizes_case_and_whitespace(
    clean_env: pytest.MonkeyPatch,
) -> None:
    clean_env.setenv("APP_ENV", "  TEST  ")
    clean_env.setenv("LOG_LEVEL", " Warning ")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.log_level == "warning"


def test_blank_database_url_means_in_memory(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("DATABASE_URL", "   ")
    assert load_settings().database_url is None


# ---- invalid values ----


@pytest.mark.parametrize("value", ["staging", ""])
def test_load_settings_rejects_invalid_app_env(
    clean_env: pytest.MonkeyPatch, value: str
) -> None:
    clean_env.setenv("APP_ENV", value)
    with pytest.raises(ValueError, match="APP_ENV must be dev"):
        load_settings()


def test_load_settings_rejects_invalid_log_level(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug"):
        load_settings()


def test_load_settings_rejects_non_boolean(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LOG_JSON", "maybe")
    with pytest.raises(ValueError, match="LOG_JSON must be a boolean"):
        load_settings()


@pytest.mark.parametrize("value", ["abc", "0", "-3"])
def test_load_settings_rejects_bad_worker_count(
    clean_env: pytest.MonkeyPatch, value: str
) -> None:
    clean_env.setenv("LOG_TASK_WORKERS", value)
    with pytest.raises(ValueError, match="LOG_TASK_WORKERS must be"):
        load_settings()


def test_load_settings_rejects_bad_port(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("PORT", "eighty")
    with pytest.raises(ValueError, match="PORT must be an integer"):
        load_settings()


@pytest.mark.parametrize("value", ["soon", "-1"])
def test_load_settings_rejects_bad_delay(
    clean_env: pytest.MonkeyPatch, value: str
) -> None:
    clean_env.setenv("LOG_TASK_DELAY_SECONDS", value)
    with pytest.raises(ValueError, match="LOG_TASK_DELAY_SECONDS must be"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
    )


@pytest.mark.parametrize(
    ("app_env", "expected"),
    [
        ("dev", (True, False, False)),
        ("test", (False, True, False)),
        ("prod", (False, False, True)),
    ],
)
def test_settings_env_flags(app_env: AppEnv, expected: tuple[bool, bool, bool]) -> None:
    s = _make_settings(app_env)
    assert (s.is_dev, s.is_test, s.is_prod) == expected


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]
