from __future__ import annotations

import datetime
from dataclasses import dataclass

from personal_blog.models.category import Category
from personal_blog.models.user import User


@dataclass(frozen=True, slots=True)
class Post:
    id: int
    title: str
    content: str
    author: User
    categories: tuple[Category, ...] = ()  # immutable
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    @staticmethod
    def new(
        *,
        title: str,
        content: str,
        author: User,
        categories: tuple[Category, ...] = (),
    ) -> Post:
        # Timestamps are stamped by the repo on add()
        return Post(
            id=0,
            title=title,
            content=content,
            author=author,
            categories=categories,
        )

    @property
    def category_names(self) -> list[str]:
        return [c.name for c in self.categories]
