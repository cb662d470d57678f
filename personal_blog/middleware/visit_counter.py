"""Counts one visit per inbound request, keyed by URL path.

The count is taken before the handler runs, so requests that end in an
error still count.  A marker on request.state (which lives in the ASGI
scope) guards against counting the same request twice when it passes
through the middleware again, e.g. on an internal re-dispatch that
reuses the scope.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from personal_blog.services.visit_counter import VisitCounter

_COUNTED_MARKER = "visit_counted"


class VisitCounterMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, counter: VisitCounter) -> None:
        super().__init__(app)
        self.counter = counter

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not getattr(request.state, _COUNTED_MARKER, False):
            setattr(request.state, _COUNTED_MARKER, True)
            self.counter.increment(request.url.path)
        return await call_next(request)
