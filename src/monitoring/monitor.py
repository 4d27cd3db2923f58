# This module is the entrypoint the host application constructs to monitor image delivery.
# It exists to wire sampling, windowed stats, and alert evaluation behind one explicitly owned object.
# A background ticker re-evaluates alerts every reporting interval and stops deterministically on stop().
# Nothing here performs I/O; loads are timed by callers and handed in as PerformanceMetric records.

from __future__ import annotations

import logging
import random
import threading
from datetime import datetime, timedelta

from src.common.clock import Clock, ensure_utc, utc_now
from src.monitoring.alert_engine import AlertEngine
from src.monitoring.metric_buffer import MetricBuffer
from src.monitoring.models import Alert, AlertStats, MonitoringStats, PerformanceMetric
from src.monitoring.monitoring_config import MonitoringConfig
from src.monitoring.stats_aggregator import compute_stats, empty_stats

LOGGER = logging.getLogger("monitoring")


class ImageDeliveryMonitor:
    """In-process collector and alert decision engine for image loads."""

    def __init__(
        self,
        config: MonitoringConfig | None = None,
        *,
        clock: Clock = utc_now,
        rng: random.Random | None = None,
        alert_engine: AlertEngine | None = None,
    ) -> None:
        self._config = config or MonitoringConfig()
        self._clock = clock
        self._buffer = MetricBuffer(self._config, rng=rng)
        # An injected engine is capped by this monitor's max_alerts like a built one.
        self._alerts = alert_engine or AlertEngine(clock=clock)
        self._alerts.set_max_alerts(self._config.max_alerts)
        self._ticker_lock = threading.Lock()
        self._ticker: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def config(self) -> MonitoringConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        ticker = self._ticker
        return ticker is not None and ticker.is_alive()

    def update_config(self, config: MonitoringConfig) -> None:
        """Replace the whole config. A running ticker keeps its interval until restarted."""

        self._config = config
        self._buffer.configure(config)
        self._alerts.set_max_alerts(config.max_alerts)
        LOGGER.info(
            "monitoring config replaced enabled=%s sample_rate=%.3f max_metrics=%d",
            config.enabled,
            config.sample_rate,
            config.max_metrics,
        )

    def record(self, metric: PerformanceMetric) -> bool:
        return self._buffer.record(metric)

    def metrics(self) -> tuple[PerformanceMetric, ...]:
        return self._buffer.snapshot()

    @property
    def buffered_count(self) -> int:
        return len(self._buffer)

    def clear_metrics(self) -> None:
        self._buffer.clear()

    def get_stats(self, time_range: tuple[datetime, datetime] | None = None) -> MonitoringStats:
        """Stats over `time_range` (inclusive), defaulting to the trailing stats window."""

        end = self._clock()
        start = end - timedelta(hours=self._config.stats_window_hours)
        if time_range is not None:
            start, end = ensure_utc(time_range[0]), ensure_utc(time_range[1])
        try:
            return compute_stats(self._buffer.snapshot(), start=start, end=end)
        except Exception:
            LOGGER.exception("stats computation failed; returning empty snapshot")
            return empty_stats(start=start, end=end)

    def check_alerts(self) -> list[Alert]:
        config = self._config
        stats = self.get_stats()
        return self._alerts.evaluate(
            stats,
            config=config,
            recent_metrics=self._buffer.recent(config.supporting_metrics_count),
        )

    def resolve_alert(self, alert_id: str) -> bool:
        return self._alerts.resolve_alert(alert_id)

    def get_alert(self, alert_id: str) -> Alert | None:
        return self._alerts.get_alert(alert_id)

    def get_alerts(self) -> list[Alert]:
        return self._alerts.get_alerts()

    def get_active_alerts(self) -> list[Alert]:
        return self._alerts.get_active_alerts()

    def get_alert_stats(self) -> AlertStats:
        return self._alerts.get_alert_stats()

    def start(self) -> bool:
        """Start periodic alert checks. Returns False when disabled or already running."""

        config = self._config
        if not config.enabled:
            LOGGER.info("monitoring disabled; ticker not started")
            return False
        if config.reporting_interval_ms <= 0:
            LOGGER.info("reporting_interval_ms=0; periodic alert checks are off")
            return False

        with self._ticker_lock:
            if self._ticker is not None and self._ticker.is_alive():
                return False
            stop_event = threading.Event()
            ticker = threading.Thread(
                target=self._run_ticker,
                args=(stop_event, config.reporting_interval_ms / 1000.0),
                daemon=True,
                name="image-delivery-alert-ticker",
            )
            self._stop_event = stop_event
            self._ticker = ticker
            ticker.start()
        LOGGER.info("alert ticker started interval_ms=%d", config.reporting_interval_ms)
        return True

    def stop(self, *, timeout: float | None = None) -> None:
        """Halt the ticker and wait for it. Safe to call repeatedly or before start()."""

        with self._ticker_lock:
            ticker = self._ticker
            self._stop_event.set()
            self._ticker = None
        if ticker is not None and ticker is not threading.current_thread():
            ticker.join(timeout)
            LOGGER.info("alert ticker stopped")

    def _run_ticker(self, stop_event: threading.Event, interval_seconds: float) -> None:
        while not stop_event.wait(interval_seconds):
            try:
                self.check_alerts()
            except Exception:
                LOGGER.exception("periodic alert check failed")

    def __enter__(self) -> ImageDeliveryMonitor:
        self.start()
        return self

    def __exit__(self, *_: object) -> None:
        self.stop()
