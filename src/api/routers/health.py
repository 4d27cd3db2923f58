# This file defines liveness and version endpoints for API operations.
# It exists so orchestration and monitoring systems can verify service health quickly.
# The health payload reports whether monitoring is enabled and the alert ticker is alive.
# Version details here help clients track API and schema compatibility over time.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.api.api_config import ApiConfig
from src.api.dependencies import get_config, get_monitor
from src.api.schema_versions import build_version_fields
from src.api.schemas.health_schemas import HealthResponse, VersionResponse
from src.monitoring.monitor import ImageDeliveryMonitor

router = APIRouter(tags=["health"])
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
MonitorDep = Annotated[ImageDeliveryMonitor, Depends(get_monitor)]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@router.get("/health", response_model=HealthResponse)
def health(
    request: Request,
    config: ConfigDep,
    monitor: MonitorDep,
) -> dict[str, object]:
    return {
        **build_version_fields(
            api_version_path=config.api_version_path,
            schema_version=config.schema_version,
        ),
        "request_id": request.state.request_id,
        "status": "ok",
        "environment": config.environment,
        "service_name": config.api_name,
        "monitoring_enabled": monitor.config.enabled,
        "alert_ticker_running": monitor.is_running,
        "buffered_metrics": monitor.buffered_count,
        "timestamp": _utc_now(),
    }


@router.get("/version", response_model=VersionResponse)
def version(
    request: Request,
    config: ConfigDep,
) -> dict[str, object]:
    return {
        **build_version_fields(
            api_version_path=config.api_version_path,
            schema_version=config.schema_version,
        ),
        "request_id": request.state.request_id,
        "api_version_path": config.api_version_path,
        "app_version": config.app_version,
        "project": config.api_name,
        "version": config.app_version,
        "timestamp": _utc_now(),
    }
