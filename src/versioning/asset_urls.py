# This module builds public asset URLs for object-storage-backed images.
# It exists so every caller joins base URL, object path, and version marker the same way.
# Without a configured base URL the builder degrades to a local `/path` URL and logs it.
# The version marker is a `v` query parameter so CDNs treat each version as a distinct object.

from __future__ import annotations

import logging
from urllib.parse import urlencode

LOGGER = logging.getLogger("versioning")

VERSION_QUERY_PARAM = "v"


def clean_object_path(path: str) -> str:
    return path[1:] if path.startswith("/") else path


def local_fallback_url(path: str) -> str:
    return f"/{clean_object_path(path)}"


def build_asset_url(
    path: str,
    *,
    base_url: str | None,
    version: str | None = None,
    use_local: bool = False,
) -> str:
    cleaned = clean_object_path(path)
    if use_local:
        url = f"/{cleaned}"
    elif not base_url:
        LOGGER.warning("asset base URL not configured; serving %s from local path", cleaned)
        url = f"/{cleaned}"
    else:
        url = f"{base_url.rstrip('/')}/{cleaned}"

    if version:
        url = f"{url}?{urlencode({VERSION_QUERY_PARAM: version})}"
    return url
