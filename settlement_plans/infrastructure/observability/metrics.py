"""Prometheus metrics for plan views, plan store calls and segment edits"""

from prometheus_client import Counter, Histogram

# View model metrics
plan_view_counter = Counter(
    "settlement_plan_view_total",
    "Plan view models built",
    ["outcome"],  # ok | degraded
)

# Plan store metrics
plan_store_fetch_failures_counter = Counter(
    "plan_store_fetch_failures_total",
    "Failed plan store calls",
    ["resource"],  # schedule | fees | statuses
)

# Segment editing
segment_edit_counter = Counter(
    "segment_edit_total",
    "Segment edit actions",
    ["action", "outcome"],  # outcome: applied | rejected
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_plan_view(degraded: bool) -> None:
    plan_view_counter.labels(outcome="degraded" if degraded else "ok").inc()
