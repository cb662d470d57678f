from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Category:
    id: int
    name: str

    @staticmethod
    def new(*, name: str) -> Category:
        return Category(id=0, name=name)
