"""SQLAlchemy engine and session factory.

When DATABASE_URL is configured, the app builds:
- a SQLAlchemy engine for that URL (PostgreSQL via psycopg, or SQLite)
- a session factory the Sql*Repo classes open short sessions from

When DATABASE_URL is None (local dev, tests), nothing here is used and
the app falls back to the in-memory store in personal_blog/db/memory.py.

WHY A SYNC ENGINE
------------------
The blog's handlers are plain `def` endpoints that Starlette runs on its
worker threadpool, one thread per request.  A synchronous Session per
repository call fits that model directly: each thread opens, uses and
closes its own session, and the engine's pool hands out connections.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all table models."""


def create_db_engine(database_url: str, *, echo: bool = False) -> Engine:
    if database_url.startswith("sqlite"):
        # One shared connection so an in-memory SQLite database is visible
        # from every worker thread.
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        database_url,
        echo=echo,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create any missing tables.  There are no migrations."""
    # Import table module so Base.metadata sees all table definitions.
    import personal_blog.db.tables  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Database schema ensured on %s", engine.url.render_as_string())


def ping(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database ping failed")
        return False
    return True


@contextmanager
def lifespan_db(engine: Engine | None) -> Iterator[None]:
    """Startup/shutdown hook for the database engine."""
    if engine is None:
        logger.info("No DATABASE_URL configured, using in-memory repositories")
        yield
        return

    create_schema(engine)
    try:
        yield
    finally:
        engine.dispose()
        logger.info("Database engine disposed")
