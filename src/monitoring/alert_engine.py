# This module evaluates delivery stats against alert thresholds and tracks alert lifecycles.
# It exists so threshold breaches become durable, resolvable records instead of one-off log lines.
# Each alert moves OPEN -> RESOLVED exactly once; resolved records are replaced, never mutated or reopened.
# The alert log is bounded by max_alerts and drops the oldest entries first.

from __future__ import annotations

import logging
import math
import threading
import uuid
from collections import Counter
from collections.abc import Callable, Sequence

from src.common.clock import Clock, epoch_millis, utc_now
from src.monitoring.instrumentation import IMAGE_ALERTS_OPENED_TOTAL
from src.monitoring.models import (
    Alert,
    AlertSeverity,
    AlertStats,
    AlertType,
    MonitoringStats,
    PerformanceMetric,
)
from src.monitoring.monitoring_config import MonitoringConfig

LOGGER = logging.getLogger("monitoring")


def _usable_threshold(value: float | None) -> bool:
    return value is not None and isinstance(value, (int, float)) and math.isfinite(value)


class AlertEngine:
    """Thread-safe rule evaluation plus a bounded, insertion-ordered alert log."""

    def __init__(
        self,
        *,
        max_alerts: int = 1000,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._max_alerts = max(1, int(max_alerts))
        self._clock = clock
        self._id_factory = id_factory or self._default_alert_id
        self._lock = threading.Lock()
        self._alerts: dict[str, Alert] = {}

    def _default_alert_id(self) -> str:
        return f"alert-{epoch_millis(self._clock())}-{uuid.uuid4().hex[:9]}"

    def set_max_alerts(self, max_alerts: int) -> None:
        with self._lock:
            self._max_alerts = max(1, int(max_alerts))
            self._trim_locked()

    def evaluate(
        self,
        stats: MonitoringStats,
        *,
        config: MonitoringConfig,
        recent_metrics: Sequence[PerformanceMetric] = (),
    ) -> list[Alert]:
        """Run the three threshold rules independently and open an alert per breach."""

        try:
            thresholds = config.alert_thresholds
            breaches: list[tuple[AlertType, AlertSeverity, str]] = []

            load_threshold = thresholds.load_time_ms
            if _usable_threshold(load_threshold) and stats.average_load_time_ms > load_threshold:
                breaches.append(
                    (
                        AlertType.PERFORMANCE,
                        AlertSeverity.MEDIUM,
                        f"Average load time {stats.average_load_time_ms:.2f}ms exceeds threshold {load_threshold:g}ms",
                    )
                )

            error_threshold = thresholds.error_rate_percent
            if (
                stats.total_requests > 0
                and _usable_threshold(error_threshold)
                and stats.error_rate_percent > error_threshold
            ):
                breaches.append(
                    (
                        AlertType.ERROR,
                        AlertSeverity.HIGH,
                        f"Error rate {stats.error_rate_percent:.2f}% exceeds threshold {error_threshold:g}%",
                    )
                )

            availability_threshold = thresholds.availability_percent
            if (
                stats.total_requests > 0
                and _usable_threshold(availability_threshold)
                and stats.availability_percent < availability_threshold
            ):
                breaches.append(
                    (
                        AlertType.AVAILABILITY,
                        AlertSeverity.CRITICAL,
                        f"Availability {stats.availability_percent:.2f}% below threshold {availability_threshold:g}%",
                    )
                )

            supporting = tuple(recent_metrics)[-config.supporting_metrics_count :] if config.supporting_metrics_count else ()
            opened: list[Alert] = []
            with self._lock:
                for alert_type, severity, message in breaches:
                    if config.dedupe_open_alerts and self._has_open_locked(alert_type):
                        LOGGER.debug("skipping %s alert, one is already open", alert_type.value)
                        continue
                    alert = Alert(
                        id=self._id_factory(),
                        type=alert_type,
                        severity=severity,
                        message=message,
                        supporting_metrics=supporting,
                        created_at=self._clock(),
                    )
                    self._alerts[alert.id] = alert
                    opened.append(alert)
                self._trim_locked()

            for alert in opened:
                IMAGE_ALERTS_OPENED_TOTAL.labels(type=alert.type.value, severity=alert.severity.value).inc()
                LOGGER.warning("ALERT [%s]: %s", alert.severity.value.upper(), alert.message)
            return opened
        except Exception:
            LOGGER.exception("alert evaluation failed; no alerts opened")
            return []

    def _has_open_locked(self, alert_type: AlertType) -> bool:
        return any(alert.type == alert_type and not alert.resolved for alert in self._alerts.values())

    def _trim_locked(self) -> None:
        overflow = len(self._alerts) - self._max_alerts
        if overflow <= 0:
            return
        for alert_id in list(self._alerts)[:overflow]:
            del self._alerts[alert_id]

    def resolve_alert(self, alert_id: str) -> bool:
        with self._lock:
            alert = self._alerts.get(alert_id)
            if alert is None or alert.resolved:
                return False
            self._alerts[alert_id] = alert.resolve(resolved_at=self._clock())
        LOGGER.info("alert resolved id=%s type=%s", alert_id, alert.type.value)
        return True

    def get_alert(self, alert_id: str) -> Alert | None:
        with self._lock:
            return self._alerts.get(alert_id)

    def get_alerts(self) -> list[Alert]:
        with self._lock:
            return list(self._alerts.values())

    def get_active_alerts(self) -> list[Alert]:
        """Unresolved alerts, oldest first."""

        with self._lock:
            return [alert for alert in self._alerts.values() if not alert.resolved]

    def get_alert_stats(self) -> AlertStats:
        with self._lock:
            alerts = list(self._alerts.values())
        active = sum(1 for alert in alerts if not alert.resolved)
        return AlertStats(
            total=len(alerts),
            active=active,
            resolved=len(alerts) - active,
            by_type=dict(Counter(alert.type.value for alert in alerts)),
            by_severity=dict(Counter(alert.severity.value for alert in alerts)),
        )
