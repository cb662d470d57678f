from __future__ import annotations

import logging

from personal_blog.models.user import User
from personal_blog.repos.user_repo import UserRepo
from personal_blog.services.cache import (
    POSTS_PREFIX,
    USERS_PREFIX,
    CacheService,
    build_key,
)
from personal_blog.services.errors import ConflictError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


def _require(value: str, field: str) -> str:
    value = value.strip()
    if not value:
        raise InvalidInputError(f"{field} must be non-empty")
    return value


class UserService:
    def __init__(self, users: UserRepo, cache: CacheService) -> None:
        self._users = users
        self._cache = cache

    def create_user(self, *, username: str, email: str, visible_name: str) -> User:
        username = _require(username, "username")
        email = _require(email, "email")
        visible_name = _require(visible_name, "visibleName")

        if self._users.get_by_email(email) is not None:
            logger.warning("Rejected duplicate email=%s", email)
            raise ConflictError("Email already exists")
        if self._users.get_by_username(username) is not None:
            logger.warning("Rejected duplicate username=%s", username)
            raise ConflictError("Username already taken")

        try:
            user = self._users.add(
                User.new(username=username, email=email, visible_name=visible_name)
            )
        except ValueError:
            # A concurrent create won the unique constraint
            raise ConflictError("Username or email already exists") from None

        self._cache.invalidate_by_prefix(USERS_PREFIX)
        logger.info("Created user id=%d username=%s", user.id, user.username)
        return user

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    def list_users(self) -> list[User]:
        key = build_key(USERS_PREFIX)
        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        users = tuple(self._users.list_all())
        self._cache.put(key, users)
        return list(users)

    def find_users_by_post_category(self, category: str) -> list[User]:
        """Users with at least one post in category (case-insensitive)."""
        key = build_key(USERS_PREFIX, ("category", category))
        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        users = tuple(self._users.list_by_post_category(category))
        self._cache.put(key, users)
        return list(users)

    def update_user(
        self, user_id: int, *, username: str, email: str, visible_name: str
    ) -> User:
        user = self.get_user(user_id)
        username = _require(username, "username")
        email = _require(email, "email")
        visible_name = _require(visible_name, "visibleName")

        if email != user.email and self._users.get_by_email(email) is not None:
            logger.warning("Rejected duplicate email=%s on update", email)
            raise ConflictError("Email already exists")
        if username != user.username and self._users.get_by_username(username) is not None:
            logger.warning("Rejected duplicate username=%s on update", username)
            raise ConflictError("Username already taken")

        try:
            updated = self._users.update(
                User(id=user.id, username=username, email=email, visible_name=visible_name)
            )
        except ValueError:
            raise ConflictError("Username or email already exists") from None
        if updated is None:
            raise NotFoundError(USER_NOT_FOUND)

        # Post views embed the author's username
        self._cache.invalidate_by_prefix(USERS_PREFIX)
        self._cache.invalidate_by_prefix(POSTS_PREFIX)
        logger.info("Updated user id=%d", updated.id)
        return updated

    def delete_user(self, user_id: int) -> None:
        if not self._users.delete(user_id):
            raise NotFoundError(USER_NOT_FOUND)
        # The user's posts were deleted with them
        self._cache.invalidate_by_prefix(USERS_PREFIX)
        self._cache.invalidate_by_prefix(POSTS_PREFIX)
        logger.info("Deleted user id=%d", user_id)
