from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class User:
    id: int
    username: str
    email: str
    visible_name: str

    @staticmethod
    def new(*, username: str, email: str, visible_name: str) -> User:
        # id 0 = not persisted yet; the repo assigns the real one on add()
        return User(id=0, username=username, email=email, visible_name=visible_name)
