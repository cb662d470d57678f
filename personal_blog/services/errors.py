"""Domain errors raised by the services.

The HTTP layer maps each one to a status code in personal_blog/api/errors.py:

  NotFoundError      → 404
  ConflictError      → 409
  InvalidInputError  → 400
"""

from __future__ import annotations


class BlogError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(BlogError, LookupError):
    pass


class ConflictError(BlogError):
    pass


class InvalidInputError(BlogError, ValueError):
    pass
