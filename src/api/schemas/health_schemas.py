# This file defines response schemas for health and version endpoints.
# It exists to keep operational status contracts explicit for platform consumers.
# The health model also reports whether the alert ticker is running.
# Stable health schemas make monitoring checks straightforward to automate.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    api_version: str
    schema_version: str
    request_id: str
    status: str
    environment: str
    service_name: str
    monitoring_enabled: bool
    alert_ticker_running: bool
    buffered_metrics: int
    timestamp: datetime


class VersionResponse(BaseModel):
    api_version: str
    schema_version: str
    request_id: str
    api_version_path: str
    app_version: str
    project: str
    version: str
    timestamp: datetime
