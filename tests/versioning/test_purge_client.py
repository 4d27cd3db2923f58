# This file tests the HTTP purge collaborator against a fake requests session.
# It exists to pin the request payload, headers, and failure mapping.
# Transport errors and non-2xx responses must both come back as False.
# No real network calls are made.

from __future__ import annotations

from typing import Any

import requests

from src.versioning.purge_client import HttpPurgeClient


class FakeResponse:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code


class FakeSession:
    def __init__(self, *, status_code: int = 200, error: Exception | None = None) -> None:
        self.status_code = status_code
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status_code)


def _client(session: FakeSession, *, token: str | None = "secret") -> HttpPurgeClient:
    return HttpPurgeClient(
        purge_url="https://purge.example.com/purge_cache",
        asset_base_url="https://cdn.example.com",
        token=token,
        timeout_seconds=3.0,
        session=session,  # type: ignore[arg-type]
    )


def test_posts_public_url_with_bearer_token() -> None:
    session = FakeSession()

    assert _client(session)("/img/a.png") is True

    (call,) = session.calls
    assert call["url"] == "https://purge.example.com/purge_cache"
    assert call["json"] == {"files": ["https://cdn.example.com/img/a.png"]}
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert call["timeout"] == 3.0


def test_omits_authorization_without_token() -> None:
    session = FakeSession()

    _client(session, token=None)("a.png")

    assert "Authorization" not in session.calls[0]["headers"]


def test_non_2xx_response_is_failure() -> None:
    assert _client(FakeSession(status_code=500))("a.png") is False


def test_transport_error_is_failure() -> None:
    session = FakeSession(error=requests.ConnectionError("connection refused"))

    assert _client(session)("a.png") is False
