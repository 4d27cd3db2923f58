# This module defines the typed records produced and consumed by image delivery monitoring.
# It exists so metrics, stats snapshots, and alerts have one closed shape across the sampler, aggregator, and API.
# Models are frozen and reject unknown fields, so a recorded observation cannot drift after the fact.
# Alert resolution replaces the stored record with a resolved copy instead of mutating it.

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.common.clock import ensure_utc


class AlertType(str, Enum):
    PERFORMANCE = "performance"
    ERROR = "error"
    AVAILABILITY = "availability"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class PerformanceMetric(BaseModel):
    """One observation of a single image load attempt."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str = Field(min_length=1)
    load_time_ms: float = Field(ge=0)
    success: bool
    error: str | None = None
    timestamp: datetime
    cache_hit: bool | None = None
    cdn_hit: bool | None = None
    client_context: str | None = None

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def validate_error_matches_outcome(self) -> PerformanceMetric:
        if self.success and self.error is not None:
            raise ValueError("error must be empty when success is true")
        if not self.success and not self.error:
            raise ValueError("error is required when success is false")
        return self


class TimeRange(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def normalize_bounds(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class MonitoringStats(BaseModel):
    """Read-only snapshot of delivery performance over a time range."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    average_load_time_ms: float = 0.0
    p95_load_time_ms: float = 0.0
    p99_load_time_ms: float = 0.0
    error_rate_percent: float = 0.0
    availability_percent: float = 100.0
    cache_hit_rate_percent: float = 0.0
    cdn_hit_rate_percent: float = 0.0
    errors_by_code: dict[str, int] = Field(default_factory=dict)
    time_range: TimeRange


class Alert(BaseModel):
    """Stateful record of a threshold breach. OPEN until resolved; resolution is terminal."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    type: AlertType
    severity: AlertSeverity
    message: str
    supporting_metrics: tuple[PerformanceMetric, ...] = ()
    created_at: datetime
    resolved: bool = False
    resolved_at: datetime | None = None

    def resolve(self, *, resolved_at: datetime) -> Alert:
        if self.resolved:
            raise ValueError(f"Alert {self.id} is already resolved")
        return self.model_copy(update={"resolved": True, "resolved_at": resolved_at})


class AlertStats(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    total: int
    active: int
    resolved: int
    by_type: dict[str, int]
    by_severity: dict[str, int]
