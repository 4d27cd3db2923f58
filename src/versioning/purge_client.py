# This file implements the HTTP purge collaborator used by the invalidation coordinator.
# It exists so CDN purge requests are built in one place instead of inside invalidation logic.
# The client posts the public asset URL to a configured purge endpoint with an optional bearer token.
# Transport failures and non-2xx responses become False; the coordinator decides what that means.

from __future__ import annotations

import logging
from typing import Any

import requests

from src.versioning.asset_urls import build_asset_url

LOGGER = logging.getLogger("versioning")


class HttpPurgeClient:
    def __init__(
        self,
        *,
        purge_url: str,
        asset_base_url: str | None,
        token: str | None = None,
        timeout_seconds: float = 8.0,
        session: requests.Session | None = None,
    ) -> None:
        self.purge_url = purge_url
        self.asset_base_url = asset_base_url
        self.token = token
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def build_payload(self, path: str) -> dict[str, Any]:
        return {"files": [build_asset_url(path, base_url=self.asset_base_url)]}

    def __call__(self, path: str) -> bool:
        try:
            response = self.session.post(
                self.purge_url,
                json=self.build_payload(path),
                headers=self._headers(),
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            LOGGER.error("purge request failed path=%s error=%s", path, exc)
            return False

        if not 200 <= response.status_code < 300:
            LOGGER.error("purge endpoint returned status=%s path=%s", response.status_code, path)
            return False
        return True
