# This file tests the per-path delivery breakdown frame.
# It exists to confirm worst paths sort first and failed loads skip timing columns.
# Empty inputs must still yield the documented column set.
# Assertions read plain DataFrame values so failures are easy to diagnose.

from __future__ import annotations

import pytest

from src.monitoring.reporting import BREAKDOWN_COLUMNS, build_path_breakdown
from tests.monitoring.support import make_metric


def test_breakdown_sorts_failing_paths_first() -> None:
    metrics = [
        make_metric(path="fast.jpg", load_time_ms=50, cache_hit=True),
        make_metric(path="fast.jpg", load_time_ms=70, cache_hit=False),
        make_metric(path="slow.jpg", load_time_ms=900),
        make_metric(path="broken.jpg", load_time_ms=10),
        make_metric(path="broken.jpg", load_time_ms=5000, success=False),
    ]

    breakdown = build_path_breakdown(metrics)

    assert list(breakdown.columns) == BREAKDOWN_COLUMNS
    assert breakdown["path"].tolist() == ["broken.jpg", "slow.jpg", "fast.jpg"]
    broken = breakdown.iloc[0]
    assert broken["failed_requests"] == 1
    assert broken["error_rate_percent"] == pytest.approx(50.0)
    assert broken["average_load_time_ms"] == pytest.approx(10.0)
    fast = breakdown.iloc[2]
    assert fast["average_load_time_ms"] == pytest.approx(60.0)
    assert fast["cache_hit_rate_percent"] == pytest.approx(50.0)


def test_breakdown_of_nothing_is_empty_frame() -> None:
    breakdown = build_path_breakdown([])

    assert breakdown.empty
    assert list(breakdown.columns) == BREAKDOWN_COLUMNS
