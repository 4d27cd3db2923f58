# This file defines monitoring endpoints under the versioned API path.
# It exists so dashboards can read stats snapshots and operators can triage and resolve alerts.
# Stats accept an optional inclusive time window; without one the monitor's trailing window is used.
# Alert listings are returned oldest first, matching the monitor's insertion order.

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request

from src.api.api_config import ApiConfig
from src.api.dependencies import get_config, get_monitor
from src.api.error_handlers import APIError
from src.api.response_envelope import build_object_envelope
from src.api.schemas.common import ErrorResponse
from src.api.schemas.monitoring_schemas import (
    AlertListResponseV1,
    AlertResolveResponseV1,
    AlertStatsResponseV1,
    MonitoringStatsResponseV1,
    PathBreakdownResponseV1,
)
from src.common.clock import ensure_utc
from src.monitoring.models import Alert
from src.monitoring.monitor import ImageDeliveryMonitor
from src.monitoring.reporting import build_path_breakdown
from src.monitoring.stats_aggregator import filter_window

router = APIRouter(prefix="/monitoring", tags=["monitoring"])
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
MonitorDep = Annotated[ImageDeliveryMonitor, Depends(get_monitor)]


def _alert_row(alert: Alert) -> dict[str, Any]:
    return {
        "id": alert.id,
        "type": alert.type.value,
        "severity": alert.severity.value,
        "message": alert.message,
        "supporting_metric_count": len(alert.supporting_metrics),
        "created_at": alert.created_at,
        "resolved": alert.resolved,
        "resolved_at": alert.resolved_at,
    }


@router.get("/stats", response_model=MonitoringStatsResponseV1, responses={400: {"model": ErrorResponse}})
def monitoring_stats(
    request: Request,
    config: ConfigDep,
    monitor: MonitorDep,
    start_ts: datetime | None = Query(default=None),
    end_ts: datetime | None = Query(default=None),
) -> dict[str, object]:
    if (start_ts is None) != (end_ts is None):
        raise APIError(
            status_code=400,
            error_code="INVALID_TIME_WINDOW",
            message="start_ts and end_ts must be provided together.",
        )
    # Naive bounds are read as UTC.
    start_ts = ensure_utc(start_ts) if start_ts is not None else None
    end_ts = ensure_utc(end_ts) if end_ts is not None else None
    if start_ts is not None and end_ts is not None and start_ts > end_ts:
        raise APIError(
            status_code=400,
            error_code="INVALID_TIME_WINDOW",
            message="start_ts must be less than or equal to end_ts.",
        )

    time_range = (start_ts, end_ts) if start_ts is not None and end_ts is not None else None
    stats = monitor.get_stats(time_range)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=stats.model_dump(),
    )


@router.get("/alerts", response_model=AlertListResponseV1)
def monitoring_alerts(
    request: Request,
    config: ConfigDep,
    monitor: MonitorDep,
    active_only: bool = Query(default=True),
) -> dict[str, object]:
    alerts = monitor.get_active_alerts() if active_only else monitor.get_alerts()
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=[_alert_row(alert) for alert in alerts],
    )


@router.get("/alerts/stats", response_model=AlertStatsResponseV1)
def monitoring_alert_stats(
    request: Request,
    config: ConfigDep,
    monitor: MonitorDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=monitor.get_alert_stats().model_dump(),
    )


@router.post(
    "/alerts/{alert_id}/resolve",
    response_model=AlertResolveResponseV1,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def monitoring_resolve_alert(
    alert_id: str,
    request: Request,
    config: ConfigDep,
    monitor: MonitorDep,
) -> dict[str, object]:
    existing = monitor.get_alert(alert_id)
    if existing is None:
        raise APIError(
            status_code=404,
            error_code="ALERT_NOT_FOUND",
            message=f"No alert with id {alert_id!r}.",
        )
    if not monitor.resolve_alert(alert_id):
        raise APIError(
            status_code=409,
            error_code="ALERT_ALREADY_RESOLVED",
            message=f"Alert {alert_id!r} is already resolved.",
        )

    resolved = monitor.get_alert(alert_id) or existing
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=_alert_row(resolved),
    )


@router.get("/paths", response_model=PathBreakdownResponseV1)
def monitoring_path_breakdown(
    request: Request,
    config: ConfigDep,
    monitor: MonitorDep,
    limit: int = Query(default=50, ge=1, le=1000),
) -> dict[str, object]:
    stats = monitor.get_stats()
    in_window = filter_window(monitor.metrics(), start=stats.time_range.start, end=stats.time_range.end)
    breakdown = build_path_breakdown(in_window)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=breakdown.head(limit).to_dict(orient="records"),
    )
