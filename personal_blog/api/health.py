"""Health and readiness endpoints.

LIVENESS vs READINESS
----------------------
  /health (liveness):
    "Is this process alive?"  Always 200 while the process can answer.
    The body reports each dependency so an operator can see a degraded
    database without the orchestrator restarting the container.

  /ready (readiness):
    "Can this instance take traffic right now?"  503 when a configured
    database does not answer, so the load balancer stops routing here
    until it recovers.  With the in-memory store there is nothing
    external to wait for, so it is always ready.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy import Engine

from personal_blog.api.dependencies import get_cache
from personal_blog.db.engine import ping
from personal_blog.services.cache import CacheService

router = APIRouter(tags=["health"])


def _database_check(engine: Engine | None) -> str:
    if engine is None:
        return "not_configured"
    return "ok" if ping(engine) else "degraded"


@router.get("/health")
def health(request: Request, cache: CacheService = Depends(get_cache)) -> dict:
    database = _database_check(request.app.state.db_engine)
    return {
        "status": "degraded" if database == "degraded" else "ok",
        "checks": {"database": database},
        "cache_entries": len(cache),
    }


@router.get("/ready")
def ready(request: Request) -> Response:
    if _database_check(request.app.state.db_engine) == "degraded":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
