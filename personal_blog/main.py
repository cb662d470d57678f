from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from personal_blog.api.categories import router as categories_router
from personal_blog.api.errors import register_exception_handlers
from personal_blog.api.health import router as health_router
from personal_blog.api.logs import router as logs_router
from personal_blog.api.metrics_endpoint import router as metrics_router
from personal_blog.api.posts import router as posts_router
from personal_blog.api.users import router as users_router
from personal_blog.api.visits import router as visits_router
from personal_blog.core.config import SETTINGS, Settings
from personal_blog.core.logging import setup_logging
from personal_blog.db.engine import create_db_engine, create_session_factory, lifespan_db
from personal_blog.db.memory import InMemoryDatabase
from personal_blog.middleware.metrics import MetricsMiddleware
from personal_blog.middleware.request_context import (
    RequestContextMiddleware,
    install_request_context_filter,
)
from personal_blog.middleware.visit_counter import VisitCounterMiddleware
from personal_blog.repos.category_repo import CategoryRepo, InMemoryCategoryRepo
from personal_blog.repos.post_repo import InMemoryPostRepo, PostRepo
from personal_blog.repos.sql_category_repo import SqlCategoryRepo
from personal_blog.repos.sql_post_repo import SqlPostRepo
from personal_blog.repos.sql_user_repo import SqlUserRepo
from personal_blog.repos.user_repo import InMemoryUserRepo, UserRepo
from personal_blog.services.cache import InMemoryCacheService
from personal_blog.services.categories_service import CategoryService
from personal_blog.services.log_tasks import LogTaskTracker
from personal_blog.services.posts_service import PostService
from personal_blog.services.users_service import UserService
from personal_blog.services.visit_counter import VisitCounter

# Configure logging before anything else runs.
setup_logging(
    SETTINGS.log_level,
    json_format=SETTINGS.log_json,
    logs_dir=SETTINGS.logs_dir if SETTINGS.log_to_file else None,
)
install_request_context_filter()

logger = logging.getLogger(__name__)


def create_app(settings: Settings = SETTINGS) -> FastAPI:
    """Build the app and every component it owns.

    Nothing here is a module-level singleton: each call gets its own
    cache, visit counter, log tracker and repositories, which is what
    lets every test run against a fresh app.
    """
    engine = None
    users: UserRepo
    categories: CategoryRepo
    posts: PostRepo
    if settings.database_url:
        engine = create_db_engine(settings.database_url)
        session_factory = create_session_factory(engine)
        users = SqlUserRepo(session_factory)
        categories = SqlCategoryRepo(session_factory)
        posts = SqlPostRepo(session_factory)
    else:
        db = InMemoryDatabase()
        users = InMemoryUserRepo(db)
        categories = InMemoryCategoryRepo(db)
        posts = InMemoryPostRepo(db)

    cache = InMemoryCacheService()
    counter = VisitCounter()
    tracker = LogTaskTracker(
        settings.logs_dir,
        max_workers=settings.log_task_workers,
        build_delay_seconds=settings.log_task_delay_seconds,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        # Teardown runs in reverse order: tracker first, then the engine
        with lifespan_db(engine):
            try:
                yield
            finally:
                tracker.shutdown(wait=True)
                logger.info("Log task worker pool stopped")

    app = FastAPI(
        title="personal-blog",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
    )

    app.state.settings = settings
    app.state.db_engine = engine
    app.state.cache = cache
    app.state.visit_counter = counter
    app.state.log_tracker = tracker
    app.state.user_service = UserService(users, cache)
    app.state.post_service = PostService(posts, users, categories, cache)
    app.state.category_service = CategoryService(categories, posts, cache)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware execution order: last-added runs first (outermost layer).
    # RequestContext → Metrics → VisitCounter → CORS → route handler
    app.add_middleware(VisitCounterMiddleware, counter=counter)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(posts_router)
    app.include_router(categories_router)
    app.include_router(logs_router)
    app.include_router(visits_router)

    logger.info(
        "personal-blog ready  env=%s log_level=%s port=%d storage=%s docs=%s",
        settings.app_env,
        settings.log_level,
        settings.port,
        "sql" if engine is not None else "memory",
        "on" if settings.is_dev else "off",
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "personal_blog.main:app",
        host="0.0.0.0",
        port=SETTINGS.port,
        log_config=None,
    )
