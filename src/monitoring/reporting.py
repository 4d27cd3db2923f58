# This module builds per-path delivery breakdowns for operators and dashboards.
# It exists so slow or failing assets can be spotted without scanning raw metric lists.
# The breakdown mirrors the aggregate stats rules: load times count successful requests only.
# Output is a plain DataFrame sorted worst-first, ready for tables or CSV export.

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import numpy as np
import pandas as pd

from src.monitoring.models import PerformanceMetric
from src.monitoring.stats_aggregator import percentile_at

BREAKDOWN_COLUMNS = [
    "path",
    "total_requests",
    "failed_requests",
    "error_rate_percent",
    "average_load_time_ms",
    "p95_load_time_ms",
    "cache_hit_rate_percent",
]


def metrics_to_frame(metrics: Iterable[PerformanceMetric]) -> pd.DataFrame:
    rows = [metric.model_dump() for metric in metrics]
    if not rows:
        return pd.DataFrame(columns=list(PerformanceMetric.model_fields))
    return pd.DataFrame(rows)


def build_path_breakdown(metrics: Iterable[PerformanceMetric]) -> pd.DataFrame:
    frame = metrics_to_frame(metrics)
    if frame.empty:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS)

    rows: list[dict[str, Any]] = []
    for path, group in frame.groupby("path", sort=True):
        total = int(len(group))
        failed = int((~group["success"].astype(bool)).sum())
        load_times = np.sort(group.loc[group["success"].astype(bool), "load_time_ms"].astype(float).to_numpy())
        cache_hits = int(group["cache_hit"].fillna(False).astype(bool).sum())
        rows.append(
            {
                "path": str(path),
                "total_requests": total,
                "failed_requests": failed,
                "error_rate_percent": failed / total * 100.0,
                "average_load_time_ms": float(load_times.mean()) if load_times.size else 0.0,
                "p95_load_time_ms": percentile_at(load_times, 0.95),
                "cache_hit_rate_percent": cache_hits / total * 100.0,
            }
        )

    breakdown = pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)
    return breakdown.sort_values(
        ["error_rate_percent", "average_load_time_ms", "path"],
        ascending=[False, False, True],
    ).reset_index(drop=True)
