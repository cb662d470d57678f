"""FastAPI dependency accessors.

create_app() builds every component once and parks it on app.state.
Endpoints ask for them through these functions, which lets tests build
an app with their own settings and get a fully isolated set of
components (cache, counter, tracker, repos) per test.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from personal_blog.services.cache import CacheService
from personal_blog.services.categories_service import CategoryService
from personal_blog.services.log_tasks import LogTaskTracker
from personal_blog.services.posts_service import PostService
from personal_blog.services.users_service import UserService
from personal_blog.services.visit_counter import VisitCounter


def get_cache(request: Request) -> CacheService:
    return request.app.state.cache


def get_counter(request: Request) -> VisitCounter:
    return request.app.state.visit_counter


def get_tracker(request: Request) -> LogTaskTracker:
    return request.app.state.log_tracker


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_post_service(request: Request) -> PostService:
    return request.app.state.post_service


def get_category_service(request: Request) -> CategoryService:
    return request.app.state.category_service


CounterDep = Annotated[VisitCounter, Depends(get_counter)]
TrackerDep = Annotated[LogTaskTracker, Depends(get_tracker)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
PostServiceDep = Annotated[PostService, Depends(get_post_service)]
CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
