"""Business metrics: product mutations and outbox delivery."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

from outbox_service.infra.metrics.prometheus import DEFAULT_LATENCY_BUCKETS, REGISTRY

# ============================================================================
# Product Metrics
# ============================================================================

products_created_total = Counter(
    "products_created_total",
    "Total number of products created",
    registry=REGISTRY,
)

products_deleted_total = Counter(
    "products_deleted_total",
    "Total number of products deleted",
    registry=REGISTRY,
)

# ============================================================================
# Outbox Metrics
# ============================================================================

outbox_events_published_total = Counter(
    "outbox_events_published_total",
    "Outbox events published and marked processed",
    ["event_type"],
    registry=REGISTRY,
)

outbox_events_failed_total = Counter(
    "outbox_events_failed_total",
    "Outbox events whose publish failed and were marked failed",
    ["event_type"],
    registry=REGISTRY,
)

outbox_pending_events = Gauge(
    "outbox_pending_events",
    "Outbox events still pending after the last worker tick",
    registry=REGISTRY,
)

outbox_publish_duration_seconds = Histogram(
    "outbox_publish_duration_seconds",
    "Time spent publishing one outbox event",
    ["event_type"],
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

__all__ = [
    "outbox_events_failed_total",
    "outbox_events_published_total",
    "outbox_pending_events",
    "outbox_publish_duration_seconds",
    "products_created_total",
    "products_deleted_total",
]
