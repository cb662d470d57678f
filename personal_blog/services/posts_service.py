"""Post use-cases: create (single and bulk), filtered reads, edits.

Posts reference categories by name on the way in.  Names are trimmed,
blank ones dropped, and any name that does not exist yet is created on
the spot, so a client can tag a post without a separate category call.

Filtered reads go through the cache under keys like
"posts:category:python:author:alice".  Any write that can change a post
list (or the "users who posted in X" view) clears both the "posts:" and
"users:" prefixes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from personal_blog.models.category import Category
from personal_blog.models.post import Post
from personal_blog.repos.category_repo import CategoryRepo
from personal_blog.repos.post_repo import PostRepo
from personal_blog.repos.user_repo import UserRepo
from personal_blog.services.cache import (
    POSTS_PREFIX,
    USERS_PREFIX,
    CacheService,
    build_key,
)
from personal_blog.services.errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

POST_NOT_FOUND = "Post not found"


@dataclass(frozen=True, slots=True)
class PostDraft:
    title: str
    content: str
    category_names: tuple[str, ...] = field(default_factory=tuple)


class PostService:
    def __init__(
        self,
        posts: PostRepo,
        users: UserRepo,
        categories: CategoryRepo,
        cache: CacheService,
    ) -> None:
        self._posts = posts
        self._users = users
        self._categories = categories
        self._cache = cache

    # -- writes --------------------------------------------------------

    def create_post(
        self,
        user_id: int,
        *,
        title: str,
        content: str,
        category_names: Iterable[str] = (),
    ) -> Post:
        draft = PostDraft(title=title, content=content, category_names=tuple(category_names))
        return self.create_posts_bulk(user_id, [draft])[0]

    def create_posts_bulk(self, user_id: int, drafts: list[PostDraft]) -> list[Post]:
        """Create every draft for one author in a single repo call.

        An empty list is a no-op: no lookup, no invalidation.
        """
        if not drafts:
            return []

        author = self._users.get_by_id(user_id)
        if author is None:
            raise NotFoundError("User not found")

        new_posts = [
            Post.new(
                title=_require(d.title, "title"),
                content=_require(d.content, "content"),
                author=author,
                categories=self._resolve_categories(d.category_names),
            )
            for d in drafts
        ]
        try:
            created = self._posts.add_many(new_posts)
        except ValueError as e:
            # Author or a category vanished between lookup and insert
            raise NotFoundError(str(e)) from None

        self._invalidate()
        logger.info("Created %d post(s) for user id=%d", len(created), user_id)
        return created

    def update_post(
        self,
        post_id: int,
        *,
        title: str | None = None,
        content: str | None = None,
        category_names: Iterable[str] | None = None,
    ) -> Post:
        """Apply the given fields.  None leaves a field as it is."""
        post = self.get_post(post_id)
        changes: dict = {}
        if title is not None:
            changes["title"] = _require(title, "title")
        if content is not None:
            changes["content"] = _require(content, "content")
        if category_names is not None:
            changes["categories"] = self._resolve_categories(category_names)

        try:
            updated = self._posts.update(replace(post, **changes))
        except ValueError as e:
            raise NotFoundError(str(e)) from None
        if updated is None:
            raise NotFoundError(POST_NOT_FOUND)

        self._invalidate()
        logger.info("Updated post id=%d", post_id)
        return updated

    def delete_post(self, post_id: int) -> None:
        if not self._posts.delete(post_id):
            raise NotFoundError(POST_NOT_FOUND)
        self._invalidate()
        logger.info("Deleted post id=%d", post_id)

    def add_category_to_post(self, post_id: int, category_id: int) -> Post:
        post = self.get_post(post_id)
        category = self._categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category not found")

        if category in post.categories:
            return post

        try:
            updated = self._posts.update(
                replace(post, categories=(*post.categories, category))
            )
        except ValueError as e:
            raise NotFoundError(str(e)) from None
        if updated is None:
            raise NotFoundError(POST_NOT_FOUND)

        self._invalidate()
        logger.info("Tagged post id=%d with category id=%d", post_id, category_id)
        return updated

    # -- reads ---------------------------------------------------------

    def get_post(self, post_id: int) -> Post:
        post = self._posts.get_by_id(post_id)
        if post is None:
            raise NotFoundError(POST_NOT_FOUND)
        return post

    def list_posts(
        self, *, category: str | None = None, author: str | None = None
    ) -> list[Post]:
        key = build_key(POSTS_PREFIX, ("category", category), ("author", author))
        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        posts = tuple(self._posts.list_by_filters(category=category, author=author))
        self._cache.put(key, posts)
        return list(posts)

    # -- helpers -------------------------------------------------------

    def _resolve_categories(self, names: Iterable[str]) -> tuple[Category, ...]:
        resolved: list[Category] = []
        for raw in names:
            name = raw.strip()
            if not name:
                continue
            category = self._categories.get_by_name(name)
            if category is None:
                try:
                    category = self._categories.add(Category.new(name=name))
                    logger.info("Created category name=%s on the fly", name)
                except ValueError:
                    # Lost a race with a concurrent create of the same name
                    category = self._categories.get_by_name(name)
                    if category is None:
                        raise
            if category not in resolved:
                resolved.append(category)
        return tuple(resolved)

    def _invalidate(self) -> None:
        self._cache.invalidate_by_prefix(POSTS_PREFIX)
        self._cache.invalidate_by_prefix(USERS_PREFIX)


def _require(value: str, field_name: str) -> str:
    value = value.strip()
    if not value:
        raise InvalidInputError(f"{field_name} must be non-empty")
    return value
