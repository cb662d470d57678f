from __future__ import annotations

import datetime
from typing import Protocol

from personal_blog.db.memory import InMemoryDatabase, PostRecord
from personal_blog.models.post import Post


class PostRepo(Protocol):
    def get_by_id(self, post_id: int) -> Post | None: ...
    def list_all(self) -> list[Post]: ...
    def list_by_filters(
        self, *, category: str | None = None, author: str | None = None
    ) -> list[Post]: ...
    def list_by_category(self, category_id: int) -> list[Post]: ...
    def add(self, post: Post) -> Post: ...
    def add_many(self, posts: list[Post]) -> list[Post]: ...
    def update(self, post: Post) -> Post | None: ...
    def delete(self, post_id: int) -> bool: ...


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class InMemoryPostRepo:
    """Category and author filters match case-insensitively."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def get_by_id(self, post_id: int) -> Post | None:
        with self._db.lock:
            record = self._db.posts.get(post_id)
            return self._db.assemble(record) if record is not None else None

    def list_all(self) -> list[Post]:
        return self.list_by_filters()

    def list_by_filters(
        self, *, category: str | None = None, author: str | None = None
    ) -> list[Post]:
        with self._db.lock:
            posts = [self._db.assemble(r) for r in self._sorted_records()]
        if category is not None:
            wanted = category.lower()
            posts = [
                p for p in posts if any(c.name.lower() == wanted for c in p.categories)
            ]
        if author is not None:
            wanted = author.lower()
            posts = [p for p in posts if p.author.username.lower() == wanted]
        return posts

    def list_by_category(self, category_id: int) -> list[Post]:
        with self._db.lock:
            return [
                self._db.assemble(r)
                for r in self._sorted_records()
                if category_id in r.category_ids
            ]

    def add(self, post: Post) -> Post:
        with self._db.lock:
            return self._insert(post)

    def add_many(self, posts: list[Post]) -> list[Post]:
        with self._db.lock:
            for post in posts:
                self._check_refs(post)
            return [self._insert(post) for post in posts]

    def update(self, post: Post) -> Post | None:
        with self._db.lock:
            existing = self._db.posts.get(post.id)
            if existing is None:
                return None
            self._check_refs(post)
            record = PostRecord(
                id=post.id,
                title=post.title,
                content=post.content,
                author_id=post.author.id,
                category_ids=_unique_ids(post),
                created_at=existing.created_at,
                updated_at=_now(),
            )
            self._db.posts[post.id] = record
            return self._db.assemble(record)

    def delete(self, post_id: int) -> bool:
        with self._db.lock:
            return self._db.posts.pop(post_id, None) is not None

    # --- helpers (caller holds the lock) ---

    def _sorted_records(self) -> list[PostRecord]:
        return sorted(self._db.posts.values(), key=lambda r: r.id)

    def _check_refs(self, post: Post) -> None:
        if post.author.id not in self._db.users:
            raise ValueError(f"unknown author id={post.author.id}")
        for category in post.categories:
            if category.id not in self._db.categories:
                raise ValueError(f"unknown category id={category.id}")

    def _insert(self, post: Post) -> Post:
        self._check_refs(post)
        now = _now()
        record = PostRecord(
            id=self._db.next_post_id(),
            title=post.title,
            content=post.content,
            author_id=post.author.id,
            category_ids=_unique_ids(post),
            created_at=now,
            updated_at=now,
        )
        self._db.posts[record.id] = record
        return self._db.assemble(record)


def _unique_ids(post: Post) -> tuple[int, ...]:
    return tuple(dict.fromkeys(c.id for c in post.categories))
