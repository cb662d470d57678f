"""Request context middleware: assigns a unique ID to every request.

WHY REQUEST IDs
-----------------
Concurrent requests interleave their log lines:

  INFO  Created post id=7 for user id=1
  INFO  Created post id=8 for user id=2
  ERROR Unhandled error on PUT /api/posts/7

Which request failed?  With an ID on every line it is obvious:

  INFO  [req-abc] Created post id=7 for user id=1
  INFO  [req-xyz] Created post id=8 for user id=2
  ERROR [req-abc] Unhandled error on PUT /api/posts/7

CONTEXT VARIABLES AND THE THREADPOOL
--------------------------------------
The ID is stored in a ContextVar.  Our endpoints are plain `def`
functions that Starlette runs on worker threads, and it copies the
current context into the worker for each call, so logging from a
service deep inside a handler still sees the right ID.  A
threading.local would not work: worker threads are reused across
requests, and the middleware itself runs on the event loop thread.

Background log-export tasks run outside any request; their lines show
"-" as the request ID.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestContextFilter(logging.Filter):
    """Attach the current request_id to every LogRecord."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        return True


def install_request_context_filter() -> None:
    """Add the filter to every root handler (idempotent).

    Filters on a logger only see records logged directly on it; handler
    filters see records propagated from child loggers too.
    """
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, _RequestContextFilter) for f in handler.filters):
            handler.addFilter(_RequestContextFilter())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request and log one summary line.

    1. Reuse the client's X-Request-ID header or mint a UUID
    2. Store it in the ContextVar for the rest of the request
    3. Log method, path, status and duration on completion
    4. Echo the ID back in the X-Request-ID response header
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = request_id_var.set(req_id)

        start = time.monotonic()
        try:
            response = await call_next(request)
            duration_ms = round((time.monotonic() - start) * 1000, 1)

            logger.info(
                "%s %s → %d (%.1fms)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={
                    "request_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = req_id
        return response
