from __future__ import annotations

import logging

from personal_blog.models.category import Category
from personal_blog.repos.category_repo import CategoryRepo
from personal_blog.repos.post_repo import PostRepo
from personal_blog.services.cache import (
    POSTS_PREFIX,
    USERS_PREFIX,
    CacheService,
)
from personal_blog.services.errors import ConflictError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

CATEGORY_NOT_FOUND = "Category not found"


class CategoryService:
    def __init__(
        self, categories: CategoryRepo, posts: PostRepo, cache: CacheService
    ) -> None:
        self._categories = categories
        self._posts = posts
        self._cache = cache

    def create_category(self, name: str) -> Category:
        name = name.strip()
        if not name:
            raise InvalidInputError("name must be non-empty")
        if self._categories.get_by_name(name) is not None:
            logger.warning("Rejected duplicate category name=%s", name)
            raise ConflictError("Name already exists")
        try:
            category = self._categories.add(Category.new(name=name))
        except ValueError:
            raise ConflictError("Name already exists") from None
        logger.info("Created category id=%d name=%s", category.id, category.name)
        return category

    def get_category(self, category_id: int) -> Category:
        category = self._categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)
        return category

    def list_categories(self) -> list[Category]:
        return self._categories.list_all()

    def list_post_titles(self, category_id: int) -> list[str]:
        return [p.title for p in self._posts.list_by_category(category_id)]

    def update_category(self, category_id: int, name: str) -> Category:
        category = self.get_category(category_id)
        name = name.strip()
        if not name:
            raise InvalidInputError("name must be non-empty")
        if name != category.name and self._categories.get_by_name(name) is not None:
            logger.warning("Rejected rename of category id=%d to taken name=%s", category_id, name)
            raise ConflictError("Name already exists")

        try:
            updated = self._categories.update(Category(id=category.id, name=name))
        except ValueError:
            raise ConflictError("Name already exists") from None
        if updated is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)

        # Cached post lists and users-by-category views are keyed on names
        self._cache.invalidate_by_prefix(POSTS_PREFIX)
        self._cache.invalidate_by_prefix(USERS_PREFIX)
        logger.info("Renamed category id=%d to %s", updated.id, updated.name)
        return updated

    def delete_category(self, category_id: int) -> None:
        if not self._categories.delete(category_id):
            raise NotFoundError(CATEGORY_NOT_FOUND)
        self._cache.invalidate_by_prefix(POSTS_PREFIX)
        self._cache.invalidate_by_prefix(USERS_PREFIX)
        logger.info("Deleted category id=%d", category_id)
