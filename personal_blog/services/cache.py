"""Read-through cache with prefix invalidation.

READ-THROUGH
-------------
  Client → Cache → miss → repository → populate cache → return
  Client → Cache → hit  → return (skip the repository entirely)

The domain services build a key from the filters of a read
("posts:category:python:author:alice"), ask the cache first, and on a
miss query the repository and store the result under that key.

PREFIX INVALIDATION
--------------------
Keys are hierarchical: "<domain>:<filter>:<value>...".  Any write in a
domain wipes every key that starts with the domain prefix ("posts:").
We never track which cached views depend on which record.  That
invalidates more than strictly necessary, but a mutation can never
leave a stale view behind.

There is no TTL and no eviction.  Entries live until a prefix
invalidation removes them or the process exits.

THREAD SAFETY
--------------
Handlers run on Starlette's worker threadpool, so several threads hit
the cache at once.  Every operation takes the same lock, which makes
each one atomic.  A get-then-put on a miss is NOT atomic as a pair: two
threads missing the same key may both query the repository and both
put.  The later put wins, and both values are equally fresh.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

from personal_blog.core.metrics import (
    CACHE_EVICTED_KEYS,
    CACHE_INVALIDATIONS,
    CACHE_OPERATIONS,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class CacheService(Protocol):
    def get(self, key: str) -> Any | None:
        """Fetch a cached value.  Returns None on cache miss."""
        ...

    def put(self, key: str, value: Any) -> None:
        """Store a value, overwriting whatever the key held.

        None is reserved for "miss" and is rejected with ValueError.
        """
        ...

    def invalidate_by_prefix(self, prefix: str) -> None:
        """Drop every key that starts with prefix."""
        ...

    def __len__(self) -> int: ...


class InMemoryCacheService:
    """Process-wide dict guarded by a lock.

    Callers should store immutable values (tuples of frozen dataclasses)
    since the same object is handed to every reader.
    """

    def __init__(self) -> None:
        self._store: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            value = self._store.get(key)
        CACHE_OPERATIONS.labels(operation="hit" if value is not None else "miss").inc()
        return value

    def put(self, key: str, value: Any) -> None:
        if value is None:
            raise ValueError(f"cannot cache None under {key!r}")
        with self._lock:
            self._store[key] = value

    def invalidate_by_prefix(self, prefix: str) -> None:
        with self._lock:
            doomed = [k for k in self._store if k.startswith(prefix)]
            for k in doomed:
                del self._store[k]
        CACHE_INVALIDATIONS.labels(prefix=prefix).inc()
        CACHE_EVICTED_KEYS.inc(len(doomed))
        logger.debug("Invalidated %d cache keys with prefix=%r", len(doomed), prefix)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store


# ---------------------------------------------------------------------------
# Key helpers
# ---------------------------------------------------------------------------

POSTS_PREFIX = "posts:"
USERS_PREFIX = "users:"


def build_key(prefix: str, *filters: tuple[str, str | None]) -> str:
    """Build "<prefix><name>:<value>:..." from the filters that are set.

    Values are lower-cased, so "Python" and "python" share one entry, and
    percent-encoded, so a value containing ":" cannot pose as a second filter.

    >>> build_key(POSTS_PREFIX, ("category", "Python"), ("author", None))
    'posts:category:python'
    >>> build_key(POSTS_PREFIX, ("category", "py:author:bob"))
    'posts:category:py%3Aauthor%3Abob'
    """
    parts = [
        f"{name}:{quote(value.lower(), safe='')}"
        for name, value in filters
        if value is not None
    ]
    return prefix + ":".join(parts)
