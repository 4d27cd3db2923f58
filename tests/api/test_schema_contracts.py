# This file tests API schema contracts and envelope helpers.
# It exists to detect accidental response-shape changes before release.
# The tests assert required paths and key fields remain present in OpenAPI output.
# Contract checks here complement the endpoint tests for each router.

from __future__ import annotations

from src.api.app import app
from src.api.response_envelope import build_object_envelope
from src.api.schema_versions import api_version_label, build_version_fields
from tests.api.support import build_test_config


def test_openapi_contains_required_paths() -> None:
    schema = app.openapi()
    required_paths = {
        "/health",
        "/version",
        "/api/v1/monitoring/stats",
        "/api/v1/monitoring/alerts",
        "/api/v1/monitoring/alerts/stats",
        "/api/v1/monitoring/alerts/{alert_id}/resolve",
        "/api/v1/monitoring/paths",
        "/api/v1/versions/resolve",
        "/api/v1/versions/compare",
        "/api/v1/versions/info",
        "/api/v1/invalidations",
    }
    available_paths = set(schema.get("paths", {}).keys())
    missing = required_paths - available_paths
    assert not missing


def test_object_envelope_includes_version_and_request_fields() -> None:
    payload = build_object_envelope(config=build_test_config(), request_id="req-2", data={"ok": True})

    assert payload["api_version"] == "v1"
    assert payload["schema_version"] == "1.0.0"
    assert payload["request_id"] == "req-2"
    assert payload["data"] == {"ok": True}
    assert payload["warnings"] is None


def test_schema_version_helpers() -> None:
    assert build_version_fields(api_version_path="/api/v2/", schema_version="2.0.0") == {
        "api_version": "v2",
        "schema_version": "2.0.0",
    }
    assert api_version_label("/api/v1") == "v1"
