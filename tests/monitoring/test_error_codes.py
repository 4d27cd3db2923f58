# This file tests keyword classification of load failure messages.
# It exists to keep rule order stable, since several keywords overlap.
# Unknown or empty messages must fall back to a network error.
# Severity and recoverability lookups are checked for representative codes.

from __future__ import annotations

import pytest

from src.monitoring.error_codes import (
    LoadErrorCode,
    classify_load_error,
    count_error_codes,
    error_severity,
    is_recoverable,
)
from src.monitoring.models import AlertSeverity
from tests.monitoring.support import make_metric


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("Request timed out", LoadErrorCode.TIMEOUT_ERROR),
        ("connect ECONNREFUSED: Connection refused", LoadErrorCode.CONNECTION_REFUSED),
        ("Failed to fetch", LoadErrorCode.NETWORK_ERROR),
        ("Cloudflare edge error", LoadErrorCode.STORAGE_UNAVAILABLE),
        ("HTTP 404", LoadErrorCode.IMAGE_NOT_FOUND),
        ("Unsupported image format", LoadErrorCode.IMAGE_FORMAT_UNSUPPORTED),
        ("File too large", LoadErrorCode.IMAGE_TOO_LARGE),
        ("Corrupted JPEG data", LoadErrorCode.IMAGE_CORRUPTED),
        ("Access denied", LoadErrorCode.PERMISSION_DENIED),
        ("429 Too Many Requests", LoadErrorCode.RATE_LIMITED),
        ("Monthly quota exhausted", LoadErrorCode.QUOTA_EXCEEDED),
        ("something odd happened", LoadErrorCode.NETWORK_ERROR),
        (None, LoadErrorCode.NETWORK_ERROR),
    ],
)
def test_classify_load_error(message: str | None, expected: LoadErrorCode) -> None:
    assert classify_load_error(message) is expected


def test_rate_limit_wins_over_generic_limit() -> None:
    assert classify_load_error("rate limit reached") is LoadErrorCode.RATE_LIMITED
    assert classify_load_error("account limit reached") is LoadErrorCode.QUOTA_EXCEEDED


def test_severity_and_recoverability() -> None:
    assert error_severity(LoadErrorCode.PERMISSION_DENIED) is AlertSeverity.CRITICAL
    assert error_severity(LoadErrorCode.IMAGE_TOO_LARGE) is AlertSeverity.LOW
    assert is_recoverable(LoadErrorCode.TIMEOUT_ERROR) is True
    assert is_recoverable(LoadErrorCode.IMAGE_CORRUPTED) is False


def test_count_error_codes_ignores_successes() -> None:
    metrics = [
        make_metric(),
        make_metric(success=False, error="timeout"),
        make_metric(success=False, error="timed out"),
        make_metric(success=False, error="not found"),
    ]

    assert count_error_codes(metrics) == {"IMAGE_NOT_FOUND": 1, "TIMEOUT_ERROR": 2}
