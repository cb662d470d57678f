"""SQLAlchemy implementation of CategoryRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from personal_blog.db.tables import CategoryRow
from personal_blog.models.category import Category


class SqlCategoryRepo:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_by_id(self, category_id: int) -> Category | None:
        with self._session_factory() as session:
            row = session.get(CategoryRow, category_id)
            return _row_to_category(row) if row is not None else None

    def get_by_name(self, name: str) -> Category | None:
        with self._session_factory() as session:
            row = session.scalars(
                select(CategoryRow).where(CategoryRow.name == name)
            ).one_or_none()
            return _row_to_category(row) if row is not None else None

    def list_all(self) -> list[Category]:
        with self._session_factory() as session:
            rows = session.scalars(select(CategoryRow).order_by(CategoryRow.id))
            return [_row_to_category(r) for r in rows]

    def add(self, category: Category) -> Category:
        row = CategoryRow(name=category.name)
        try:
            with self._session_factory.begin() as session:
                session.add(row)
                session.flush()
                return _row_to_category(row)
        except IntegrityError as e:
            raise ValueError("category name already exists") from e

    def update(self, category: Category) -> Category | None:
        try:
            with self._session_factory.begin() as session:
                row = session.get(CategoryRow, category.id)
                if row is None:
                    return None
                row.name = category.name
                session.flush()
                return _row_to_category(row)
        except IntegrityError as e:
            raise ValueError("category name already exists") from e

    def delete(self, category_id: int) -> bool:
        with self._session_factory.begin() as session:
            row = session.get(CategoryRow, category_id)
            if row is None:
                return False
            # The ORM removes the post_categories links along with the row
            session.delete(row)
            return True


def _row_to_category(row: CategoryRow) -> Category:
    return Category(id=row.id, name=row.name)
