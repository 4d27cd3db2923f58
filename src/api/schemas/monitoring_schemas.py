# This file defines monitoring endpoint schemas for stats snapshots and alerts.
# It exists so dashboards and alert routers consume typed, versioned payloads.
# Alert rows omit the supporting metric bodies by default and report only their count.
# Keeping these models explicit helps catch accidental payload drift during development.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from src.api.schemas.common import EnvelopeFields


class TimeRangeV1(BaseModel):
    start: datetime
    end: datetime


class MonitoringStatsV1(BaseModel):
    total_requests: int
    successful_requests: int
    failed_requests: int
    average_load_time_ms: float
    p95_load_time_ms: float
    p99_load_time_ms: float
    error_rate_percent: float
    availability_percent: float
    cache_hit_rate_percent: float
    cdn_hit_rate_percent: float
    errors_by_code: dict[str, int]
    time_range: TimeRangeV1


class MonitoringStatsResponseV1(EnvelopeFields):
    data: MonitoringStatsV1


class AlertRowV1(BaseModel):
    id: str
    type: str
    severity: str
    message: str
    supporting_metric_count: int
    created_at: datetime
    resolved: bool
    resolved_at: datetime | None = None


class AlertListResponseV1(EnvelopeFields):
    data: list[AlertRowV1]


class AlertStatsV1(BaseModel):
    total: int
    active: int
    resolved: int
    by_type: dict[str, int]
    by_severity: dict[str, int]


class AlertStatsResponseV1(EnvelopeFields):
    data: AlertStatsV1


class AlertResolveResponseV1(EnvelopeFields):
    data: AlertRowV1


class PathBreakdownRowV1(BaseModel):
    path: str
    total_requests: int
    failed_requests: int
    error_rate_percent: float
    average_load_time_ms: float
    p95_load_time_ms: float
    cache_hit_rate_percent: float


class PathBreakdownResponseV1(EnvelopeFields):
    data: list[PathBreakdownRowV1]
