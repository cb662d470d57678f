"""SQLAlchemy implementation of UserRepo."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from personal_blog.db.tables import CategoryRow, PostRow, UserRow
from personal_blog.models.user import User


class SqlUserRepo:
    """Satisfies the UserRepo Protocol.  One short session per call."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_by_id(self, user_id: int) -> User | None:
        with self._session_factory() as session:
            row = session.get(UserRow, user_id)
            return _row_to_user(row) if row is not None else None

    def get_by_username(self, username: str) -> User | None:
        return self._one(select(UserRow).where(UserRow.username == username))

    def get_by_email(self, email: str) -> User | None:
        return self._one(select(UserRow).where(UserRow.email == email))

    def list_all(self) -> list[User]:
        with self._session_factory() as session:
            rows = session.scalars(select(UserRow).order_by(UserRow.id))
            return [_row_to_user(r) for r in rows]

    def list_by_post_category(self, category_name: str) -> list[User]:
        stmt = (
            select(UserRow)
            .where(
                UserRow.posts.any(
                    PostRow.categories.any(
                        func.lower(CategoryRow.name) == category_name.lower()
                    )
                )
            )
            .order_by(UserRow.id)
        )
        with self._session_factory() as session:
            return [_row_to_user(r) for r in session.scalars(stmt)]

    def add(self, user: User) -> User:
        row = UserRow(
            username=user.username,
            email=user.email,
            visible_name=user.visible_name,
        )
        try:
            with self._session_factory.begin() as session:
                session.add(row)
                session.flush()
                return _row_to_user(row)
        except IntegrityError as e:
            raise ValueError("username or email already exists") from e

    def update(self, user: User) -> User | None:
        try:
            with self._session_factory.begin() as session:
                row = session.get(UserRow, user.id)
                if row is None:
                    return None
                row.username = user.username
                row.email = user.email
                row.visible_name = user.visible_name
                session.flush()
                return _row_to_user(row)
        except IntegrityError as e:
            raise ValueError("username or email already exists") from e

    def delete(self, user_id: int) -> bool:
        with self._session_factory.begin() as session:
            row = session.get(UserRow, user_id)
            if row is None:
                return False
            session.delete(row)  # cascades to the user's posts
            return True

    def _one(self, stmt) -> User | None:
        with self._session_factory() as session:
            row = session.scalars(stmt).one_or_none()
            return _row_to_user(row) if row is not None else None


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        visible_name=row.visible_name or "",
    )
