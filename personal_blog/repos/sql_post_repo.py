"""SQLAlchemy implementation of PostRepo."""

from __future__ import annotations

import datetime

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, sessionmaker

from personal_blog.db.tables import CategoryRow, PostRow, UserRow
from personal_blog.models.category import Category
from personal_blog.models.post import Post
from personal_blog.models.user import User


class SqlPostRepo:
    """Category and author filters match case-insensitively."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_by_id(self, post_id: int) -> Post | None:
        with self._session_factory() as session:
            row = session.get(PostRow, post_id)
            return _row_to_post(row) if row is not None else None

    def list_all(self) -> list[Post]:
        return self.list_by_filters()

    def list_by_filters(
        self, *, category: str | None = None, author: str | None = None
    ) -> list[Post]:
        stmt: Select[tuple[PostRow]] = select(PostRow).order_by(PostRow.id)
        if category is not None:
            stmt = stmt.where(
                PostRow.categories.any(func.lower(CategoryRow.name) == category.lower())
            )
        if author is not None:
            stmt = stmt.where(
                PostRow.author.has(func.lower(UserRow.username) == author.lower())
            )
        with self._session_factory() as session:
            return [_row_to_post(r) for r in session.scalars(stmt)]

    def list_by_category(self, category_id: int) -> list[Post]:
        stmt = (
            select(PostRow)
            .where(PostRow.categories.any(CategoryRow.id == category_id))
            .order_by(PostRow.id)
        )
        with self._session_factory() as session:
            return [_row_to_post(r) for r in session.scalars(stmt)]

    def add(self, post: Post) -> Post:
        return self.add_many([post])[0]

    def add_many(self, posts: list[Post]) -> list[Post]:
        now = _now()
        with self._session_factory.begin() as session:
            rows = []
            for post in posts:
                row = PostRow(
                    title=post.title,
                    content=post.content,
                    author=_load_author(session, post.author),
                    categories=_load_categories(session, post.categories),
                    created_at=now,
                    updated_at=now,
                )
                session.add(row)
                rows.append(row)
            session.flush()
            return [_row_to_post(r) for r in rows]

    def update(self, post: Post) -> Post | None:
        with self._session_factory.begin() as session:
            row = session.get(PostRow, post.id)
            if row is None:
                return None
            row.title = post.title
            row.content = post.content
            row.author = _load_author(session, post.author)
            row.categories = _load_categories(session, post.categories)
            row.updated_at = _now()
            session.flush()
            return _row_to_post(row)

    def delete(self, post_id: int) -> bool:
        with self._session_factory.begin() as session:
            row = session.get(PostRow, post_id)
            if row is None:
                return False
            session.delete(row)
            return True


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _load_author(session: Session, author: User) -> UserRow:
    row = session.get(UserRow, author.id)
    if row is None:
        raise ValueError(f"unknown author id={author.id}")
    return row


def _load_categories(
    session: Session, categories: tuple[Category, ...]
) -> list[CategoryRow]:
    rows: list[CategoryRow] = []
    for category in categories:
        row = session.get(CategoryRow, category.id)
        if row is None:
            raise ValueError(f"unknown category id={category.id}")
        if row not in rows:
            rows.append(row)
    return rows


def _row_to_post(row: PostRow) -> Post:
    return Post(
        id=row.id,
        title=row.title,
        content=row.content,
        author=User(
            id=row.author.id,
            username=row.author.username,
            email=row.author.email,
            visible_name=row.author.visible_name or "",
        ),
        categories=tuple(Category(id=c.id, name=c.name) for c in row.categories),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
