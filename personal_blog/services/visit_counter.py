"""Per-URL visit counter.

The VisitCounterMiddleware calls increment() once per inbound request.
Counts live in process memory and are never reset.
"""

from __future__ import annotations

import threading
from collections import Counter

from personal_blog.core.metrics import VISITS_RECORDED


class VisitCounter:
    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def increment(self, url: str) -> int:
        """Count one visit to url.  Returns the new total."""
        with self._lock:
            self._counts[url] += 1
            count = self._counts[url]
        VISITS_RECORDED.inc()
        return count

    def get_count(self, url: str) -> int:
        with self._lock:
            return self._counts[url]

    def get_all(self) -> dict[str, int]:
        """Snapshot of every counted URL."""
        with self._lock:
            return dict(self._counts)
