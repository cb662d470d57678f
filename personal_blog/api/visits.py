from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from personal_blog.api.dependencies import CounterDep

router = APIRouter(prefix="/api/visits", tags=["visits"])


@router.get("/count")
def get_visit_count(counter: CounterDep, url: Annotated[str, Query()]) -> int:
    """Visits recorded for one request path, e.g. ?url=/api/posts."""
    return counter.get_count(url)


@router.get("/all")
def get_all_visits(counter: CounterDep) -> dict[str, int]:
    return counter.get_all()
