"""
Prometheus metrics for the scoring core.

DRY: Centralize metric definitions and helpers here to avoid scattered
instrumentation across modules. All metrics live on a private registry that
the serving layer exposes through ``render_latest()``.
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

# ============================================================================
# Cache
# ============================================================================

cache_lookups_total = Counter(
    "riftcoach_cache_lookups_total",
    "Cache lookups by namespace and outcome",
    labelnames=("namespace", "outcome"),  # outcome: hit | miss | error
    registry=_registry,
)

# ============================================================================
# Data source
# ============================================================================

data_source_latency_seconds = Histogram(
    "riftcoach_data_source_latency_seconds",
    "Data source query latency",
    labelnames=("query",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
    registry=_registry,
)

data_source_failures_total = Counter(
    "riftcoach_data_source_failures_total",
    "Data source failures by query and reason",
    labelnames=("query", "reason"),  # reason: timeout | error
    registry=_registry,
)

# ============================================================================
# Domain outcomes
# ============================================================================

cohort_sample_size = Histogram(
    "riftcoach_cohort_sample_size",
    "Metric rows sampled per cohort build",
    buckets=(0, 5, 10, 25, 50, 100, 250, 500, 1000),
    registry=_registry,
)

cohort_score = Histogram(
    "riftcoach_cohort_score",
    "Cohort-relative scores produced",
    labelnames=("role",),
    buckets=(10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
    registry=_registry,
)

badges_awarded_total = Counter(
    "riftcoach_badges_awarded_total",
    "Rule-based badges awarded",
    labelnames=("badge", "polarity"),
    registry=_registry,
)

narrator_requests_total = Counter(
    "riftcoach_narrator_requests_total",
    "Badge narration attempts by outcome",
    labelnames=("outcome",),  # outcome: ok | fallback
    registry=_registry,
)


def mark_cache(namespace: str, outcome: str) -> None:
    cache_lookups_total.labels(namespace=namespace, outcome=outcome).inc()


def observe_data_source(query: str, duration_seconds: float) -> None:
    data_source_latency_seconds.labels(query=query).observe(max(0.0, duration_seconds))


def mark_data_source_failure(query: str, reason: str) -> None:
    data_source_failures_total.labels(query=query, reason=reason).inc()


def observe_cohort_sample(size: int) -> None:
    cohort_sample_size.observe(size)


def observe_score(role: str, score: int) -> None:
    cohort_score.labels(role=role).observe(score)


def mark_badge_awarded(badge: str, polarity: str) -> None:
    badges_awarded_total.labels(badge=badge, polarity=polarity).inc()


def mark_narrator(outcome: str) -> None:
    narrator_requests_total.labels(outcome=outcome).inc()


def render_latest() -> tuple[bytes, str]:
    """Render the registry in Prometheus text exposition format."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST
