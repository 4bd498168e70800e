"""
Centralized Prometheus metrics.

All application metrics are defined here to prevent duplication
and ensure consistent labeling across modules.
"""

from prometheus_client import Counter, Histogram


# ── Authorization Metrics ─────────────────────────────────────────────────────

authorization_decisions = Counter(
    "caselab_authorization_decisions_total",
    "Sensitive-operation checks made by the authorization gate",
    ["role", "operation", "outcome"]
)


# ── Role Resolution Metrics ───────────────────────────────────────────────────

role_resolution_latency = Histogram(
    "caselab_role_resolution_seconds",
    "End-to-end latency of a role resolution",
    ["outcome"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

role_resolution_failures = Counter(
    "caselab_role_resolution_failures_total",
    "Role lookups that errored or timed out",
    ["source", "reason"]
)

role_cache_lookups = Counter(
    "caselab_role_cache_lookups_total",
    "Resolved-role cache lookups",
    ["result"]
)
