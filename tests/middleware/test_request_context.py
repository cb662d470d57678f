"""Tests for the request context middleware.

Every response gets an X-Request-ID header (generated or echoed), and
the ID reaches log records emitted while handling the request.
"""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from personal_blog.middleware.request_context import (
    _RequestContextFilter,
    install_request_context_filter,
    request_id_var,
)


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/api/posts/999")
    assert resp.status_code == 404
    assert resp.headers.get("x-request-id") is not None


def test_summary_line_logged_per_request(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="personal_blog.middleware.request_context"):
        client.get("/health", headers={"X-Request-ID": "req-abc"})

    records = [r for r in caplog.records if r.name.endswith("request_context")]
    assert len(records) == 1
    assert records[0].request_id == "req-abc"  # type: ignore[attr-defined]
    assert records[0].status_code == 200  # type: ignore[attr-defined]
    assert "GET /health" in records[0].getMessage()


def test_request_id_is_reset_after_the_request(client: TestClient) -> None:
    client.get("/health", headers={"X-Request-ID": "req-xyz"})
    assert request_id_var.get() == "-"


def test_filter_stamps_current_request_id() -> None:
    record = logging.LogRecord("t", logging.INFO, "t.py", 1, "msg", (), None)
    token = request_id_var.set("req-123")
    try:
        _RequestContextFilter().filter(record)
    finally:
        request_id_var.reset(token)
    assert record.request_id == "req-123"  # type: ignore[attr-defined]


def test_install_filter_is_idempotent() -> None:
    handler = logging.NullHandler()
    root = logging.getLogger()
    root.addHandler(handler)
    try:
        install_request_context_filter()
        install_request_context_filter()
        assert sum(isinstance(f, _RequestContextFilter) for f in handler.filters) == 1
    finally:
        root.removeHandler(handler)
