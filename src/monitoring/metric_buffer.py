# This module samples and retains image load observations in a bounded in-memory window.
# It exists so instrumented request paths can report every load without growing memory or blocking.
# Retention is probabilistic: a uniform draw below the configured sample rate keeps the metric.
# Once capacity is reached the oldest observations are evicted first; record never raises.

from __future__ import annotations

import logging
import random
import threading
from collections import deque

from src.monitoring.instrumentation import (
    IMAGE_LOAD_DURATION_SECONDS,
    IMAGE_METRICS_OFFERED_TOTAL,
    IMAGE_METRICS_RETAINED_TOTAL,
    IMAGE_METRICS_SAMPLED_OUT_TOTAL,
)
from src.monitoring.models import PerformanceMetric
from src.monitoring.monitoring_config import MonitoringConfig

LOGGER = logging.getLogger("monitoring")


class MetricBuffer:
    """Thread-safe sampled ring buffer of `PerformanceMetric` records."""

    def __init__(self, config: MonitoringConfig, *, rng: random.Random | None = None) -> None:
        self._config = config
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._metrics: deque[PerformanceMetric] = deque(maxlen=config.max_metrics)

    @property
    def config(self) -> MonitoringConfig:
        return self._config

    def configure(self, config: MonitoringConfig) -> None:
        """Swap in a new config, keeping the newest metrics that fit the new capacity."""

        with self._lock:
            self._config = config
            if self._metrics.maxlen != config.max_metrics:
                self._metrics = deque(self._metrics, maxlen=config.max_metrics)

    def record(self, metric: PerformanceMetric) -> bool:
        """Offer a metric to the buffer. Returns True when it was retained."""

        try:
            config = self._config
            if not config.enabled:
                return False

            IMAGE_METRICS_OFFERED_TOTAL.inc()
            with self._lock:
                draw = self._rng.random()
                if draw >= config.sample_rate:
                    IMAGE_METRICS_SAMPLED_OUT_TOTAL.inc()
                    return False
                self._metrics.append(metric)

            IMAGE_METRICS_RETAINED_TOTAL.labels(outcome="success" if metric.success else "failure").inc()
            if metric.success:
                IMAGE_LOAD_DURATION_SECONDS.observe(metric.load_time_ms / 1000.0)
            return True
        except Exception:
            LOGGER.warning("dropping metric for path=%s after internal error", getattr(metric, "path", None), exc_info=True)
            return False

    def snapshot(self) -> tuple[PerformanceMetric, ...]:
        with self._lock:
            return tuple(self._metrics)

    def recent(self, count: int) -> tuple[PerformanceMetric, ...]:
        if count <= 0:
            return ()
        with self._lock:
            return tuple(self._metrics)[-count:]

    def clear(self) -> None:
        with self._lock:
            self._metrics.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)
