# This file tests the monitor facade end to end, from recording through alerting.
# It exists to exercise sampling, windowed stats, and alert checks together.
# The ticker tests confirm start and stop are idempotent and leave no running thread.
# A fake clock pins the default stats window so results never depend on wall time.

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from src.monitoring.alert_engine import AlertEngine
from src.monitoring.models import AlertType
from src.monitoring.monitor import ImageDeliveryMonitor
from src.monitoring.monitoring_config import AlertThresholds, MonitoringConfig
from tests.fakes import FakeClock
from tests.monitoring.support import BASE_TIME, make_metric


def _monitor(config: MonitoringConfig, clock: FakeClock | None = None) -> ImageDeliveryMonitor:
    return ImageDeliveryMonitor(config, clock=clock or FakeClock(BASE_TIME))


def test_small_buffer_scenario_keeps_last_three_and_averages_them() -> None:
    config = MonitoringConfig(
        sample_rate=1.0,
        max_metrics=3,
        alert_thresholds=AlertThresholds(load_time_ms=500, error_rate_percent=None, availability_percent=None),
    )
    monitor = _monitor(config)

    for load_time in (100, 100, 100, 900):
        monitor.record(make_metric(load_time_ms=load_time))

    assert [metric.load_time_ms for metric in monitor.metrics()] == [100, 100, 900]
    stats = monitor.get_stats()
    assert round(stats.average_load_time_ms, 2) == 366.67
    # The rule compares the average, which stays under 500 here.
    assert monitor.check_alerts() == []


def test_small_buffer_scenario_opens_one_performance_alert_when_average_breaches() -> None:
    config = MonitoringConfig(
        sample_rate=1.0,
        max_metrics=3,
        alert_thresholds=AlertThresholds(load_time_ms=300, error_rate_percent=5, availability_percent=95),
    )
    monitor = _monitor(config)

    for load_time in (100, 100, 100, 900):
        monitor.record(make_metric(load_time_ms=load_time))

    opened = monitor.check_alerts()

    assert [alert.type for alert in opened] == [AlertType.PERFORMANCE]
    assert len(opened[0].supporting_metrics) == 3


def test_two_failures_in_ten_give_twenty_percent_error_rate() -> None:
    monitor = _monitor(MonitoringConfig())

    for index in range(10):
        monitor.record(make_metric(success=index >= 2))

    stats = monitor.get_stats()
    assert stats.error_rate_percent == pytest.approx(20.0)
    assert stats.availability_percent == pytest.approx(80.0)
    opened = {alert.type for alert in monitor.check_alerts()}
    assert opened == {AlertType.ERROR, AlertType.AVAILABILITY}


def test_default_window_excludes_metrics_older_than_window() -> None:
    clock = FakeClock(BASE_TIME)
    monitor = _monitor(MonitoringConfig(stats_window_hours=1), clock)
    monitor.record(make_metric(timestamp=BASE_TIME - timedelta(hours=2)))
    monitor.record(make_metric(timestamp=BASE_TIME - timedelta(minutes=30)))

    assert monitor.get_stats().total_requests == 1
    start, end = BASE_TIME - timedelta(hours=3), BASE_TIME
    assert monitor.get_stats((start, end)).total_requests == 2


def test_disabled_monitor_records_nothing_and_does_not_start() -> None:
    monitor = _monitor(MonitoringConfig(enabled=False))

    assert monitor.record(make_metric()) is False
    assert monitor.start() is False
    assert monitor.is_running is False


def test_update_config_applies_to_following_records() -> None:
    monitor = _monitor(MonitoringConfig(sample_rate=1.0))
    monitor.record(make_metric())

    monitor.update_config(MonitoringConfig(sample_rate=0.0, max_alerts=5))

    assert monitor.record(make_metric()) is False
    assert monitor.buffered_count == 1
    assert monitor.config.max_alerts == 5


def test_zero_reporting_interval_disables_ticker() -> None:
    monitor = _monitor(MonitoringConfig(reporting_interval_ms=0))

    assert monitor.start() is False
    assert monitor.is_running is False


def test_start_and_stop_are_idempotent() -> None:
    monitor = _monitor(MonitoringConfig(reporting_interval_ms=60_000))

    monitor.stop()
    assert monitor.start() is True
    assert monitor.start() is False
    assert monitor.is_running is True

    monitor.stop(timeout=2.0)
    monitor.stop(timeout=2.0)
    assert monitor.is_running is False


def test_ticker_runs_alert_checks_until_stopped() -> None:
    config = MonitoringConfig(
        reporting_interval_ms=10,
        alert_thresholds=AlertThresholds(load_time_ms=50, error_rate_percent=None, availability_percent=None),
    )
    engine = AlertEngine(clock=FakeClock(BASE_TIME))
    monitor = ImageDeliveryMonitor(config, clock=FakeClock(BASE_TIME), alert_engine=engine)
    monitor.record(make_metric(load_time_ms=400))

    with monitor:
        deadline = time.monotonic() + 5.0
        while not monitor.get_active_alerts() and time.monotonic() < deadline:
            time.sleep(0.01)

    assert monitor.is_running is False
    assert monitor.get_active_alerts()
    settled = len(monitor.get_alerts())
    time.sleep(0.05)
    assert len(monitor.get_alerts()) == settled


def test_resolve_alert_through_monitor() -> None:
    monitor = _monitor(
        MonitoringConfig(alert_thresholds=AlertThresholds(load_time_ms=10, error_rate_percent=None, availability_percent=None))
    )
    monitor.record(make_metric(load_time_ms=200))
    (alert,) = monitor.check_alerts()

    assert monitor.resolve_alert("nope") is False
    assert monitor.resolve_alert(alert.id) is True
    assert monitor.get_active_alerts() == []
    assert monitor.get_alert_stats().resolved == 1


def test_clear_metrics_empties_buffer() -> None:
    monitor = _monitor(MonitoringConfig())
    monitor.record(make_metric())

    monitor.clear_metrics()

    assert monitor.buffered_count == 0
    assert monitor.get_stats().total_requests == 0


def test_naive_metrics_are_counted_and_still_raise_alerts() -> None:
    monitor = _monitor(
        MonitoringConfig(alert_thresholds=AlertThresholds(load_time_ms=100, error_rate_percent=None, availability_percent=None))
    )
    naive_now = BASE_TIME.replace(tzinfo=None)

    monitor.record(make_metric(load_time_ms=400, timestamp=naive_now - timedelta(minutes=1)))

    assert monitor.get_stats().total_requests == 1
    naive_window = (naive_now - timedelta(hours=1), naive_now)
    assert monitor.get_stats(naive_window).total_requests == 1
    assert [alert.type for alert in monitor.check_alerts()] == [AlertType.PERFORMANCE]


def test_injected_alert_engine_is_capped_by_config_max_alerts() -> None:
    engine = AlertEngine(max_alerts=1000, clock=FakeClock(BASE_TIME))
    config = MonitoringConfig(
        max_alerts=2,
        alert_thresholds=AlertThresholds(load_time_ms=10, error_rate_percent=5, availability_percent=95),
    )
    monitor = ImageDeliveryMonitor(config, clock=FakeClock(BASE_TIME), alert_engine=engine)
    for index in range(10):
        monitor.record(make_metric(load_time_ms=200, success=index >= 2))

    opened = monitor.check_alerts()

    assert len(opened) == 3
    assert len(monitor.get_alerts()) == 2


def test_concurrent_recording_keeps_buffer_bounded_and_snapshots_consistent() -> None:
    max_metrics = 25
    monitor = _monitor(
        MonitoringConfig(
            sample_rate=1.0,
            max_metrics=max_metrics,
            alert_thresholds=AlertThresholds(load_time_ms=150, error_rate_percent=30, availability_percent=70),
        )
    )
    writers_done = threading.Event()
    snapshots = []

    def write(worker: int) -> None:
        for index in range(400):
            monitor.record(make_metric(load_time_ms=100 + worker, success=(worker + index) % 4 != 0))

    def read() -> None:
        while not writers_done.is_set():
            snapshots.append(monitor.get_stats())
            monitor.check_alerts()
        snapshots.append(monitor.get_stats())

    reader = threading.Thread(target=read)
    reader.start()
    with ThreadPoolExecutor(max_workers=6) as pool:
        futures = [pool.submit(write, worker) for worker in range(6)]
        for future in futures:
            future.result()
    writers_done.set()
    reader.join(timeout=10.0)

    assert not reader.is_alive()
    assert monitor.buffered_count == max_metrics
    assert snapshots
    for stats in snapshots:
        assert stats.successful_requests + stats.failed_requests == stats.total_requests
        assert stats.total_requests <= max_metrics
    assert snapshots[-1].total_requests == max_metrics
