# This file provides metric builders shared by monitoring tests.
# It exists so each test states only the fields it cares about.
# Timestamps default to the fake clock's start so stats windows include them.
# Failed metrics always carry an error message to satisfy the model invariant.

from __future__ import annotations

from datetime import UTC, datetime

from src.monitoring.models import PerformanceMetric

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def make_metric(
    *,
    load_time_ms: float = 100.0,
    success: bool = True,
    path: str = "products/tea.jpg",
    error: str | None = None,
    timestamp: datetime | None = None,
    cache_hit: bool | None = None,
    cdn_hit: bool | None = None,
) -> PerformanceMetric:
    return PerformanceMetric(
        path=path,
        load_time_ms=load_time_ms,
        success=success,
        error=None if success else (error or "network error"),
        timestamp=timestamp or BASE_TIME,
        cache_hit=cache_hit,
        cdn_hit=cdn_hit,
    )


class FixedDraws:
    """Stand-in for random.Random that replays a fixed sequence of draws."""

    def __init__(self, *draws: float) -> None:
        self._draws = list(draws)

    def random(self) -> float:
        return self._draws.pop(0)
