from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from personal_blog.db.memory import InMemoryDatabase
from personal_blog.models.user import User


class UserRepo(Protocol):
    def get_by_id(self, user_id: int) -> User | None: ...
    def get_by_username(self, username: str) -> User | None: ...
    def get_by_email(self, email: str) -> User | None: ...
    def list_all(self) -> list[User]: ...
    def list_by_post_category(self, category_name: str) -> list[User]: ...
    def add(self, user: User) -> User: ...
    def update(self, user: User) -> User | None: ...
    def delete(self, user_id: int) -> bool: ...


class InMemoryUserRepo:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def get_by_id(self, user_id: int) -> User | None:
        with self._db.lock:
            return self._db.users.get(user_id)

    def get_by_username(self, username: str) -> User | None:
        with self._db.lock:
            return next(
                (u for u in self._db.users.values() if u.username == username), None
            )

    def get_by_email(self, email: str) -> User | None:
        with self._db.lock:
            return next((u for u in self._db.users.values() if u.email == email), None)

    def list_all(self) -> list[User]:
        with self._db.lock:
            return sorted(self._db.users.values(), key=lambda u: u.id)

    def list_by_post_category(self, category_name: str) -> list[User]:
        wanted = category_name.lower()
        with self._db.lock:
            category_ids = {
                c.id for c in self._db.categories.values() if c.name.lower() == wanted
            }
            author_ids = {
                p.author_id
                for p in self._db.posts.values()
                if category_ids.intersection(p.category_ids)
            }
            return [self._db.users[uid] for uid in sorted(author_ids)]

    def add(self, user: User) -> User:
        with self._db.lock:
            if self.get_by_email(user.email) is not None:
                raise ValueError("email already exists")
            if self.get_by_username(user.username) is not None:
                raise ValueError("username already exists")
            stored = replace(user, id=self._db.next_user_id())
            self._db.users[stored.id] = stored
            return stored

    def update(self, user: User) -> User | None:
        with self._db.lock:
            if user.id not in self._db.users:
                return None
            self._db.users[user.id] = user
            return user

    def delete(self, user_id: int) -> bool:
        with self._db.lock:
            if self._db.users.pop(user_id, None) is None:
                return False
            # Cascade: the user's posts go with them
            for pid in [p.id for p in self._db.posts.values() if p.author_id == user_id]:
                del self._db.posts[pid]
            return True
