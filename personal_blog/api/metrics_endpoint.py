"""Prometheus metrics endpoint.

Prometheus scrapes this every N seconds.  The body is plain text in the
exposition format, not JSON:

  # HELP cache_operations_total Cache get operations by result
  # TYPE cache_operations_total counter
  cache_operations_total{operation="hit"} 42.0
  cache_operations_total{operation="miss"} 7.0

Restrict access in production (internal port or scraper allow-list);
request rates and error patterns reveal a lot about a service.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
