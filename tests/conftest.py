from __future__ import annotations

import os
import time
from collections.abc import Callable, Iterator
from dataclasses import replace
from pathlib import Path

# Settings are read at import time; keep the suite from writing ./logs
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from personal_blog.core.config import SETTINGS, Settings  # noqa: E402
from personal_blog.main import create_app  # noqa: E402


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return replace(
        SETTINGS,
        app_env="test",
        database_url=None,
        logs_dir=tmp_path / "logs",
        log_to_file=False,
        log_task_workers=2,
        log_task_delay_seconds=0.0,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """A fresh app per test: its own cache, counter, tracker and store."""
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll predicate until it is true or timeout seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def create_user(
    client: TestClient,
    username: str = "alice",
    email: str | None = None,
    visible_name: str = "Alice A.",
) -> dict:
    resp = client.post(
        "/api/users",
        json={
            "username": username,
            "email": email or f"{username}@example.com",
            "visibleName": visible_name,
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_post(
    client: TestClient,
    user_id: int,
    title: str = "Hello, world",
    content: str = "A first post with enough content.",
    categories: list[str] | None = None,
) -> dict:
    resp = client.post(
        f"/api/posts/user/{user_id}",
        json={
            "title": title,
            "content": content,
            "categoryNames": categories or [],
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
