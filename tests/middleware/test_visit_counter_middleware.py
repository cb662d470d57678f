from __future__ import annotations

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from personal_blog.middleware.visit_counter import VisitCounterMiddleware
from personal_blog.services.visit_counter import VisitCounter


async def _hello(_request: Request) -> PlainTextResponse:
    return PlainTextResponse("hi")


async def _boom(_request: Request) -> PlainTextResponse:
    raise RuntimeError("boom")


def _app(counter: VisitCounter, layers: int = 1) -> Starlette:
    app = Starlette(routes=[Route("/hello", _hello), Route("/boom", _boom)])
    for _ in range(layers):
        app.add_middleware(VisitCounterMiddleware, counter=counter)
    return app


def test_counts_each_request_once() -> None:
    counter = VisitCounter()
    client = TestClient(_app(counter))
    client.get("/hello")
    client.get("/hello")
    assert counter.get_count("/hello") == 2


def test_same_request_passing_twice_counts_once() -> None:
    counter = VisitCounter()
    client = TestClient(_app(counter, layers=2))
    client.get("/hello")
    assert counter.get_count("/hello") == 1


def test_failed_requests_still_count() -> None:
    counter = VisitCounter()
    client = TestClient(_app(counter), raise_server_exceptions=False)
    assert client.get("/boom").status_code == 500
    assert counter.get_count("/boom") == 1


def test_unrouted_paths_count() -> None:
    counter = VisitCounter()
    client = TestClient(_app(counter))
    assert client.get("/missing").status_code == 404
    assert counter.get_count("/missing") == 1
