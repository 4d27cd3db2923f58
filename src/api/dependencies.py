# This file provides dependency factories for FastAPI routes and lifecycle hooks.
# It exists so the monitor, version manager, and invalidation coordinator are created once and shared.
# The setup keeps routers thin and makes endpoint tests easy to override with isolated instances.
# Centralized construction also ensures one consistent API configuration is used.

from __future__ import annotations

from functools import lru_cache

from src.api.api_config import ApiConfig, get_api_config
from src.monitoring.monitor import ImageDeliveryMonitor
from src.monitoring.monitoring_config import load_monitoring_config
from src.versioning.invalidation import InvalidationCoordinator
from src.versioning.purge_client import HttpPurgeClient
from src.versioning.version_manager import VersionManager
from src.versioning.versioning_config import load_versioning_config


@lru_cache(maxsize=1)
def get_monitor() -> ImageDeliveryMonitor:
    config = get_api_config()
    return ImageDeliveryMonitor(load_monitoring_config(config_path=config.monitoring_config_path))


@lru_cache(maxsize=1)
def get_version_manager() -> VersionManager:
    config = get_api_config()
    return VersionManager(
        base_url=config.asset_base_url,
        config=load_versioning_config(config_path=config.versioning_config_path),
    )


@lru_cache(maxsize=1)
def get_invalidation_coordinator() -> InvalidationCoordinator | None:
    config = get_api_config()
    if not config.cdn_purge_url:
        return None
    version_manager = get_version_manager()
    purge_client = HttpPurgeClient(
        purge_url=config.cdn_purge_url,
        asset_base_url=config.asset_base_url,
        token=config.cdn_purge_token,
        timeout_seconds=version_manager.config.purge_timeout_seconds,
    )
    return InvalidationCoordinator(purge_client, version_manager)


def get_config() -> ApiConfig:
    return get_api_config()
