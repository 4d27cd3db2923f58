# This file defines runtime configuration for cache-busting versions and invalidation.
# It exists so max-age, purge fan-out, and history retention are tuned without code edits.
# The loader merges YAML defaults with VERSIONING_* environment overrides.
# Validation happens once at load time so a bad value fails startup instead of a purge run.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = "configs/versioning.yaml"


def _load_yaml(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config at {path} must be a mapping, got: {type(loaded).__name__}")
    return dict(loaded)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


@dataclass(frozen=True)
class VersioningConfig:
    default_max_age_ms: int = 3_600_000
    purge_max_concurrency: int = 8
    purge_timeout_seconds: float = 10.0
    version_history_size: int = 20

    def to_dict(self) -> dict[str, Any]:
        return {
            "default_max_age_ms": self.default_max_age_ms,
            "purge_max_concurrency": self.purge_max_concurrency,
            "purge_timeout_seconds": self.purge_timeout_seconds,
            "version_history_size": self.version_history_size,
        }


def load_versioning_config(*, config_path: str | None = DEFAULT_CONFIG_PATH) -> VersioningConfig:
    cfg: dict[str, Any] = {}
    if config_path and os.path.exists(config_path):
        cfg = _load_yaml(config_path)

    default_max_age_ms = _env_int("VERSIONING_DEFAULT_MAX_AGE_MS", int(cfg.get("default_max_age_ms", 3_600_000)))
    purge_max_concurrency = _env_int("VERSIONING_PURGE_MAX_CONCURRENCY", int(cfg.get("purge_max_concurrency", 8)))
    purge_timeout_seconds = _env_float("VERSIONING_PURGE_TIMEOUT_SECONDS", float(cfg.get("purge_timeout_seconds", 10.0)))
    version_history_size = _env_int("VERSIONING_HISTORY_SIZE", int(cfg.get("version_history_size", 20)))

    if default_max_age_ms < 0:
        raise ValueError("default_max_age_ms must be nonnegative")
    if purge_max_concurrency <= 0:
        raise ValueError("purge_max_concurrency must be > 0")
    if purge_timeout_seconds <= 0:
        raise ValueError("purge_timeout_seconds must be > 0")
    if version_history_size < 0:
        raise ValueError("version_history_size must be nonnegative")

    return VersioningConfig(
        default_max_age_ms=default_max_age_ms,
        purge_max_concurrency=purge_max_concurrency,
        purge_timeout_seconds=purge_timeout_seconds,
        version_history_size=version_history_size,
    )
