# This file provides shared helpers for API endpoint tests.
# It exists so tests can override the monitor, version manager, and purge coordinator with isolated instances.
# The helpers build consistent config objects and scoped TestClient contexts.
# Centralized test wiring keeps API tests small and focused on behavior.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi.testclient import TestClient

from src.api.api_config import ApiConfig
from src.api.app import app
from src.api.dependencies import (
    get_config,
    get_invalidation_coordinator,
    get_monitor,
    get_version_manager,
)
from src.monitoring.monitor import ImageDeliveryMonitor
from src.monitoring.monitoring_config import MonitoringConfig
from src.versioning.invalidation import InvalidationCoordinator
from src.versioning.version_manager import VersionManager


def build_test_config(*, max_batch_paths: int = 500) -> ApiConfig:
    """Create deterministic API config for tests."""

    return ApiConfig(
        api_name="Test Image API",
        api_version_path="/api/v1",
        schema_version="1.0.0",
        host="0.0.0.0",
        port=8000,
        environment="test",
        app_version="0.1.0",
        allowed_origins=[],
        asset_base_url="https://cdn.example.com",
        cdn_purge_url=None,
        cdn_purge_token=None,
        start_monitor_on_startup=False,
        max_batch_paths=max_batch_paths,
    )


def build_test_monitor() -> ImageDeliveryMonitor:
    return ImageDeliveryMonitor(MonitoringConfig(reporting_interval_ms=0))


@contextmanager
def api_test_client(
    *,
    config: ApiConfig | None = None,
    monitor: ImageDeliveryMonitor | None = None,
    version_manager: VersionManager | None = None,
    coordinator: InvalidationCoordinator | None = None,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides.

    Without a coordinator the purge endpoint behaves as if no purge URL were configured.
    """

    resolved_config = config or build_test_config()
    resolved_monitor = monitor or build_test_monitor()
    resolved_manager = version_manager or VersionManager(base_url=resolved_config.asset_base_url)

    app.dependency_overrides[get_config] = lambda: resolved_config
    app.dependency_overrides[get_monitor] = lambda: resolved_monitor
    app.dependency_overrides[get_version_manager] = lambda: resolved_manager
    app.dependency_overrides[get_invalidation_coordinator] = lambda: coordinator

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
