# This module times caller-supplied image loads and records the outcome with the monitor.
# It exists so request paths get telemetry by wrapping their fetch call instead of building metrics by hand.
# Failures, including exceptions raised by the load, are captured as metric data and never re-raised.
# The returned metric carries the load's own success flag so callers can branch on it unchanged.

from __future__ import annotations

import inspect
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from src.common.clock import Clock, utc_now
from src.monitoring.models import PerformanceMetric
from src.monitoring.monitor import ImageDeliveryMonitor

UNREPORTED_FAILURE = "load reported failure"


@dataclass(frozen=True)
class LoadOutcome:
    """Richer result a load function may return instead of a bare bool."""

    success: bool
    error: str | None = None
    cache_hit: bool | None = None
    cdn_hit: bool | None = None


LoadResult = bool | LoadOutcome


def _build_metric(
    *,
    path: str,
    started_at: datetime,
    elapsed_ms: float,
    result: LoadResult | None,
    error: BaseException | None,
    client_context: str | None,
) -> PerformanceMetric:
    if error is not None:
        return PerformanceMetric(
            path=path,
            load_time_ms=elapsed_ms,
            success=False,
            error=str(error) or type(error).__name__,
            timestamp=started_at,
            client_context=client_context,
        )

    outcome = result if isinstance(result, LoadOutcome) else LoadOutcome(success=bool(result))
    return PerformanceMetric(
        path=path,
        load_time_ms=elapsed_ms,
        success=outcome.success,
        error=None if outcome.success else (outcome.error or UNREPORTED_FAILURE),
        timestamp=started_at,
        cache_hit=outcome.cache_hit,
        cdn_hit=outcome.cdn_hit,
        client_context=client_context,
    )


async def measure_load(
    path: str,
    load_fn: Callable[[], Awaitable[LoadResult]],
    *,
    monitor: ImageDeliveryMonitor,
    client_context: str | None = None,
    clock: Clock = utc_now,
) -> PerformanceMetric:
    started_at = clock()
    started = time.perf_counter()
    result: LoadResult | None = None
    failure: BaseException | None = None
    try:
        result = await load_fn()
    except Exception as exc:
        failure = exc
    elapsed_ms = (time.perf_counter() - started) * 1000.0

    metric = _build_metric(
        path=path,
        started_at=started_at,
        elapsed_ms=elapsed_ms,
        result=result,
        error=failure,
        client_context=client_context,
    )
    monitor.record(metric)
    return metric


def measure_load_sync(
    path: str,
    load_fn: Callable[[], LoadResult],
    *,
    monitor: ImageDeliveryMonitor,
    client_context: str | None = None,
    clock: Clock = utc_now,
) -> PerformanceMetric:
    """Blocking variant of `measure_load` for synchronous fetch functions."""

    if inspect.iscoroutinefunction(load_fn):
        raise TypeError("measure_load_sync expects a synchronous load function; use measure_load")

    started_at = clock()
    started = time.perf_counter()
    result: LoadResult | None = None
    failure: BaseException | None = None
    try:
        result = load_fn()
    except Exception as exc:
        failure = exc
    elapsed_ms = (time.perf_counter() - started) * 1000.0

    metric = _build_metric(
        path=path,
        started_at=started_at,
        elapsed_ms=elapsed_ms,
        result=result,
        error=failure,
        client_context=client_context,
    )
    monitor.record(metric)
    return metric
