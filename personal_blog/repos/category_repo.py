from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from personal_blog.db.memory import InMemoryDatabase
from personal_blog.models.category import Category


class CategoryRepo(Protocol):
    def get_by_id(self, category_id: int) -> Category | None: ...
    def get_by_name(self, name: str) -> Category | None: ...
    def list_all(self) -> list[Category]: ...
    def add(self, category: Category) -> Category: ...
    def update(self, category: Category) -> Category | None: ...
    def delete(self, category_id: int) -> bool: ...


class InMemoryCategoryRepo:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def get_by_id(self, category_id: int) -> Category | None:
        with self._db.lock:
            return self._db.categories.get(category_id)

    def get_by_name(self, name: str) -> Category | None:
        with self._db.lock:
            return next(
                (c for c in self._db.categories.values() if c.name == name), None
            )

    def list_all(self) -> list[Category]:
        with self._db.lock:
            return sorted(self._db.categories.values(), key=lambda c: c.id)

    def add(self, category: Category) -> Category:
        with self._db.lock:
            if self.get_by_name(category.name) is not None:
                raise ValueError("category name already exists")
            stored = replace(category, id=self._db.next_category_id())
            self._db.categories[stored.id] = stored
            return stored

    def update(self, category: Category) -> Category | None:
        with self._db.lock:
            if category.id not in self._db.categories:
                return None
            self._db.categories[category.id] = category
            return category

    def delete(self, category_id: int) -> bool:
        with self._db.lock:
            if self._db.categories.pop(category_id, None) is None:
                return False
            # Unlink from every post that carried it
            for record in list(self._db.posts.values()):
                if category_id in record.category_ids:
                    self._db.posts[record.id] = replace(
                        record,
                        category_ids=tuple(
                            cid for cid in record.category_ids if cid != category_id
                        ),
                    )
            return True
