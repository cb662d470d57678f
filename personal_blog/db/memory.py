"""In-memory relational store used when DATABASE_URL is not set.

Holds the three tables plus the post↔category link as plain dicts and
keeps them consistent the way the database's foreign keys would:

  - deleting a user deletes that user's posts
  - deleting a category unlinks it from every post

Posts are stored as rows that reference their author and categories by
id, and are assembled into Post dataclasses on read, so renaming a user
or a category is immediately visible through every post.

One re-entrant lock guards the whole store.  The repos in
personal_blog/repos/ take it for every read and write.
"""

from __future__ import annotations

import datetime
import itertools
import threading
from dataclasses import dataclass

from personal_blog.models.category import Category
from personal_blog.models.post import Post
from personal_blog.models.user import User


@dataclass(frozen=True, slots=True)
class PostRecord:
    id: int
    title: str
    content: str
    author_id: int
    category_ids: tuple[int, ...]
    created_at: datetime.datetime
    updated_at: datetime.datetime | None


class InMemoryDatabase:
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users: dict[int, User] = {}
        self.categories: dict[int, Category] = {}
        self.posts: dict[int, PostRecord] = {}
        self._user_ids = itertools.count(1)
        self._category_ids = itertools.count(1)
        self._post_ids = itertools.count(1)

    def next_user_id(self) -> int:
        return next(self._user_ids)

    def next_category_id(self) -> int:
        return next(self._category_ids)

    def next_post_id(self) -> int:
        return next(self._post_ids)

    def assemble(self, record: PostRecord) -> Post:
        """Build the Post dataclass for a stored row.  Caller holds the lock."""
        return Post(
            id=record.id,
            title=record.title,
            content=record.content,
            author=self.users[record.author_id],
            categories=tuple(
                self.categories[cid]
                for cid in record.category_ids
                if cid in self.categories
            ),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

