"""Prometheus metrics for webhook dispatch."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

webhook_dispatch_total = Counter(
    "rollout_notify_dispatch_total",
    "Webhook dispatch attempts by outcome",
    ["provider", "outcome"],
)
webhook_dispatch_duration_seconds = Histogram(
    "rollout_notify_dispatch_duration_seconds",
    "Wall time of a single webhook dispatch",
    ["provider"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
