# This module assigns machine-readable error codes to failed image loads.
# It exists so operators can see why loads fail without reading raw collaborator messages.
# Classification is keyword-driven and deterministic; the first matching rule wins.
# Severity and recoverability lookups let alert consumers triage by failure class.

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from src.monitoring.models import AlertSeverity, PerformanceMetric


class LoadErrorCode(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
    IMAGE_FORMAT_UNSUPPORTED = "IMAGE_FORMAT_UNSUPPORTED"
    IMAGE_TOO_LARGE = "IMAGE_TOO_LARGE"
    IMAGE_CORRUPTED = "IMAGE_CORRUPTED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RATE_LIMITED = "RATE_LIMITED"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"


# Order matters: "rate limit" must be checked before the generic "limit" quota rule.
_CLASSIFICATION_RULES: tuple[tuple[tuple[str, ...], LoadErrorCode], ...] = (
    (("timeout", "timed out"), LoadErrorCode.TIMEOUT_ERROR),
    (("connection refused",), LoadErrorCode.CONNECTION_REFUSED),
    (("network", "fetch"), LoadErrorCode.NETWORK_ERROR),
    (("cloudflare", "object store", "storage unavailable"), LoadErrorCode.STORAGE_UNAVAILABLE),
    (("not found", "404"), LoadErrorCode.IMAGE_NOT_FOUND),
    (("format", "unsupported"), LoadErrorCode.IMAGE_FORMAT_UNSUPPORTED),
    (("too large", "size"), LoadErrorCode.IMAGE_TOO_LARGE),
    (("corrupted", "invalid"), LoadErrorCode.IMAGE_CORRUPTED),
    (("permission", "access denied", "forbidden", "403"), LoadErrorCode.PERMISSION_DENIED),
    (("rate limit", "429", "too many requests"), LoadErrorCode.RATE_LIMITED),
    (("quota", "limit"), LoadErrorCode.QUOTA_EXCEEDED),
)

_SEVERITY_BY_CODE: dict[LoadErrorCode, AlertSeverity] = {
    LoadErrorCode.NETWORK_ERROR: AlertSeverity.MEDIUM,
    LoadErrorCode.TIMEOUT_ERROR: AlertSeverity.MEDIUM,
    LoadErrorCode.CONNECTION_REFUSED: AlertSeverity.HIGH,
    LoadErrorCode.STORAGE_UNAVAILABLE: AlertSeverity.HIGH,
    LoadErrorCode.IMAGE_NOT_FOUND: AlertSeverity.MEDIUM,
    LoadErrorCode.IMAGE_FORMAT_UNSUPPORTED: AlertSeverity.LOW,
    LoadErrorCode.IMAGE_TOO_LARGE: AlertSeverity.LOW,
    LoadErrorCode.IMAGE_CORRUPTED: AlertSeverity.MEDIUM,
    LoadErrorCode.PERMISSION_DENIED: AlertSeverity.CRITICAL,
    LoadErrorCode.RATE_LIMITED: AlertSeverity.MEDIUM,
    LoadErrorCode.QUOTA_EXCEEDED: AlertSeverity.HIGH,
}

_RECOVERABLE_CODES = frozenset(
    {
        LoadErrorCode.NETWORK_ERROR,
        LoadErrorCode.TIMEOUT_ERROR,
        LoadErrorCode.STORAGE_UNAVAILABLE,
        LoadErrorCode.IMAGE_NOT_FOUND,
        LoadErrorCode.RATE_LIMITED,
    }
)


def classify_load_error(message: str | None) -> LoadErrorCode:
    normalized = (message or "").lower()
    for keywords, code in _CLASSIFICATION_RULES:
        if any(keyword in normalized for keyword in keywords):
            return code
    return LoadErrorCode.NETWORK_ERROR


def error_severity(code: LoadErrorCode) -> AlertSeverity:
    return _SEVERITY_BY_CODE.get(code, AlertSeverity.MEDIUM)


def is_recoverable(code: LoadErrorCode) -> bool:
    return code in _RECOVERABLE_CODES


def count_error_codes(metrics: Iterable[PerformanceMetric]) -> dict[str, int]:
    """Count failed metrics per error code, ordered by code name for stable output."""

    counts: dict[str, int] = {}
    for metric in metrics:
        if metric.success:
            continue
        code = classify_load_error(metric.error).value
        counts[code] = counts.get(code, 0) + 1
    return dict(sorted(counts.items()))
