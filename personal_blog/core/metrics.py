"""Application metrics using the Prometheus client library.

All metrics are defined here, in one inventory.  Other modules import
specific metrics and increment/observe them at the point of action.

Prometheus PULLS these values from GET /metrics; see
personal_blog/api/metrics_endpoint.py.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Application-specific metrics
# ---------------------------------------------------------------------------

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Cache get operations by result",
    ["operation"],  # "hit" or "miss"
)

CACHE_INVALIDATIONS = Counter(
    "cache_invalidations_total",
    "Prefix invalidations by prefix",
    ["prefix"],  # "posts:", "users:"
)

CACHE_EVICTED_KEYS = Counter(
    "cache_evicted_keys_total",
    "Keys removed by prefix invalidation",
)

LOG_TASK_TRANSITIONS = Counter(
    "log_tasks_total",
    "Log export task status transitions",
    ["status"],  # IN_PROGRESS, COMPLETED, FAILED
)

LOG_TASKS_RUNNING = Gauge(
    "log_tasks_running",
    "Log export tasks currently building on the worker pool",
)

VISITS_RECORDED = Counter(
    "visits_recorded_total",
    "Requests counted by the visit counter",
)
