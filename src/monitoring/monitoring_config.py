# This file defines runtime configuration for image delivery monitoring.
# It exists so sampling, retention, alert thresholds, and the reporting cadence share one policy surface.
# The loader merges YAML defaults with MONITORING_* environment overrides and validates the result.
# Configs are frozen; changing behavior means building a new config and swapping it in wholesale.

from __future__ import annotations

import math
import os
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CONFIG_PATH = "configs/monitoring.yaml"


class AlertThresholds(BaseModel):
    """Named alert thresholds. A `None` threshold disables its rule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    load_time_ms: float | None = 2000.0
    error_rate_percent: float | None = 5.0
    availability_percent: float | None = 95.0


class MonitoringConfig(BaseModel):
    """Typed monitoring policy."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = True
    sample_rate: float = 1.0
    alert_thresholds: AlertThresholds = Field(default_factory=AlertThresholds)
    reporting_interval_ms: int = Field(default=60_000, ge=0)
    max_metrics: int = Field(default=10_000, ge=1)
    max_alerts: int = Field(default=1000, ge=1)
    supporting_metrics_count: int = Field(default=10, ge=0)
    dedupe_open_alerts: bool = False
    stats_window_hours: float = Field(default=24.0, gt=0)

    @field_validator("sample_rate", mode="before")
    @classmethod
    def clamp_sample_rate(cls, value: Any) -> float:
        rate = float(value)
        if math.isnan(rate):
            raise ValueError("sample_rate must be a number")
        return min(1.0, max(0.0, rate))

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


def _load_yaml(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config at {path} must be a mapping, got: {type(loaded).__name__}")
    return dict(loaded)


def _env_value(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _env_bool(name: str) -> bool | None:
    value = _env_value(name)
    if value is None:
        return None
    normalized = value.lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean value (true/false), got: {value!r}")


_ENV_OVERRIDES: dict[str, tuple[str, type]] = {
    "MONITORING_ENABLED": ("enabled", bool),
    "MONITORING_SAMPLE_RATE": ("sample_rate", float),
    "MONITORING_REPORTING_INTERVAL_MS": ("reporting_interval_ms", int),
    "MONITORING_MAX_METRICS": ("max_metrics", int),
    "MONITORING_MAX_ALERTS": ("max_alerts", int),
    "MONITORING_SUPPORTING_METRICS_COUNT": ("supporting_metrics_count", int),
    "MONITORING_DEDUPE_OPEN_ALERTS": ("dedupe_open_alerts", bool),
    "MONITORING_STATS_WINDOW_HOURS": ("stats_window_hours", float),
}

_THRESHOLD_ENV_OVERRIDES: dict[str, str] = {
    "MONITORING_ALERT_LOAD_TIME_MS": "load_time_ms",
    "MONITORING_ALERT_ERROR_RATE_PERCENT": "error_rate_percent",
    "MONITORING_ALERT_AVAILABILITY_PERCENT": "availability_percent",
}


def load_monitoring_config(*, config_path: str | None = DEFAULT_CONFIG_PATH) -> MonitoringConfig:
    """Build a validated config from an optional YAML file plus environment overrides."""

    cfg: dict[str, Any] = {}
    if config_path and os.path.exists(config_path):
        cfg = _load_yaml(config_path)

    thresholds = dict(cfg.pop("alert_thresholds", None) or {})

    for env_name, (field_name, kind) in _ENV_OVERRIDES.items():
        if kind is bool:
            flag = _env_bool(env_name)
            if flag is not None:
                cfg[field_name] = flag
            continue
        raw = _env_value(env_name)
        if raw is not None:
            cfg[field_name] = kind(raw)

    for env_name, field_name in _THRESHOLD_ENV_OVERRIDES.items():
        raw = _env_value(env_name)
        if raw is None:
            continue
        thresholds[field_name] = None if raw.lower() in {"none", "off", "disabled"} else float(raw)

    cfg["alert_thresholds"] = AlertThresholds.model_validate(thresholds)
    return MonitoringConfig.model_validate(cfg)
