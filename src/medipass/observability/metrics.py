"""Prometheus metrics for MediPass sharing.

Usage::

    from medipass.observability.metrics import SHARE_GRANTS_CREATED_TOTAL

    SHARE_GRANTS_CREATED_TOTAL.labels(ttl_hours="24").inc()
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    generate_latest,
)

SHARE_GRANTS_CREATED_TOTAL = Counter(
    "medipass_share_grants_created_total",
    "Sharing grants written to the ledger.",
    labelnames=["ttl_hours"],
    registry=REGISTRY,
)

SHARE_GRANT_WRITE_FAILURES_TOTAL = Counter(
    "medipass_share_grant_write_failures_total",
    "Grant writes rejected by the document store.",
    registry=REGISTRY,
)

SHARE_RESOLUTIONS_TOTAL = Counter(
    "medipass_share_resolutions_total",
    "Shared-link resolutions by outcome.",
    labelnames=["outcome"],
    registry=REGISTRY,
)


def metrics_text() -> tuple[bytes, str]:
    """Return (body, content_type) for a /metrics response."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
