# This module computes windowed delivery statistics from retained load observations.
# It exists so dashboards and the alert engine read one consistent snapshot shape.
# Percentiles use nearest-rank indexing at floor(n * q) over successful load times only.
# The computation is pure: it never mutates the buffer and returns zeros for empty windows.

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime

import numpy as np

from src.common.clock import ensure_utc
from src.monitoring.error_codes import count_error_codes
from src.monitoring.models import MonitoringStats, PerformanceMetric, TimeRange


def percentile_at(sorted_values: np.ndarray, quantile: float) -> float:
    """Return the value at index floor(n * quantile) of an ascending array, or 0 when empty."""

    count = int(sorted_values.size)
    if count == 0:
        return 0.0
    index = min(int(math.floor(count * quantile)), count - 1)
    return float(sorted_values[index])


def filter_window(
    metrics: Iterable[PerformanceMetric], *, start: datetime, end: datetime
) -> list[PerformanceMetric]:
    start, end = ensure_utc(start), ensure_utc(end)
    return [metric for metric in metrics if start <= metric.timestamp <= end]


def compute_stats(
    metrics: Iterable[PerformanceMetric],
    *,
    start: datetime,
    end: datetime,
) -> MonitoringStats:
    start, end = ensure_utc(start), ensure_utc(end)
    window = filter_window(metrics, start=start, end=end)

    total = len(window)
    load_times = np.sort(np.array([metric.load_time_ms for metric in window if metric.success], dtype=float))
    successful = int(load_times.size)
    failed = total - successful

    average = float(load_times.mean()) if successful else 0.0
    error_rate = (failed / total) * 100.0 if total else 0.0
    cache_hits = sum(1 for metric in window if metric.cache_hit)
    cdn_hits = sum(1 for metric in window if metric.cdn_hit)

    return MonitoringStats(
        total_requests=total,
        successful_requests=successful,
        failed_requests=failed,
        average_load_time_ms=average,
        p95_load_time_ms=percentile_at(load_times, 0.95),
        p99_load_time_ms=percentile_at(load_times, 0.99),
        error_rate_percent=error_rate,
        availability_percent=100.0 - error_rate,
        cache_hit_rate_percent=(cache_hits / total) * 100.0 if total else 0.0,
        cdn_hit_rate_percent=(cdn_hits / total) * 100.0 if total else 0.0,
        errors_by_code=count_error_codes(window),
        time_range=TimeRange(start=start, end=end),
    )


def empty_stats(*, start: datetime, end: datetime) -> MonitoringStats:
    return MonitoringStats(time_range=TimeRange(start=start, end=end))
