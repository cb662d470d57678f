"""Prometheus metrics middleware: instruments every HTTP request.

For each request:
  1. ACTIVE_REQUESTS goes up (and back down on completion)
  2. the request is timed
  3. REQUEST_COUNT is incremented by method/endpoint/status and the
     duration lands in the REQUEST_DURATION histogram

ENDPOINT LABEL
---------------
The label is the matched route template ("/api/posts/{post_id}"), not
the raw path.  Raw paths would mint a new time series for every id ever
requested.  Requests that match no route (404s) fall back to the raw
path.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from personal_blog.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION


def _endpoint_label(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) else request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect Prometheus metrics for every HTTP request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Prometheus scrapes would otherwise inflate the request count
        if request.url.path == "/metrics":
            return await call_next(request)

        ACTIVE_REQUESTS.inc()
        start = time.monotonic()
        status_code = "500"

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
        finally:
            duration = time.monotonic() - start
            ACTIVE_REQUESTS.dec()
            endpoint = _endpoint_label(request)
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
            ).inc()
            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(duration)

        return response
