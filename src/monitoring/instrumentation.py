# This module declares the Prometheus collectors exported by the delivery monitor.
# It exists so the in-process monitor and the invalidation coordinator report through the same scrape surface as the API.
# Collectors are module-level singletons, registered once on import like the API request metrics.
# Label sets stay small and closed (outcome, alert type, severity) to keep cardinality bounded.

from __future__ import annotations

from prometheus_client import Counter, Histogram

IMAGE_METRICS_OFFERED_TOTAL = Counter(
    "image_delivery_metrics_offered_total",
    "Load observations offered to the monitor while enabled.",
)
IMAGE_METRICS_RETAINED_TOTAL = Counter(
    "image_delivery_metrics_retained_total",
    "Load observations retained after sampling.",
    ["outcome"],
)
IMAGE_METRICS_SAMPLED_OUT_TOTAL = Counter(
    "image_delivery_metrics_sampled_out_total",
    "Load observations dropped by the sampling policy.",
)
IMAGE_LOAD_DURATION_SECONDS = Histogram(
    "image_delivery_load_duration_seconds",
    "Retained image load durations in seconds.",
    buckets=(0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)
IMAGE_ALERTS_OPENED_TOTAL = Counter(
    "image_delivery_alerts_opened_total",
    "Alerts opened by the alert engine.",
    ["type", "severity"],
)
IMAGE_INVALIDATIONS_TOTAL = Counter(
    "image_delivery_invalidations_total",
    "Cache invalidation attempts by outcome.",
    ["outcome"],
)
