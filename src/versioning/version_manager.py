# This module derives cache-busting version tokens for image paths and remembers the latest per path.
# It exists so URL construction, staleness checks, and invalidation share one source of version truth.
# Timestamp and hash strategies self-generate; semantic and manual strategies demand an explicit version.
# Hash versions are only authoritative when the caller supplies a content fingerprint.

from __future__ import annotations

import hashlib
import logging
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np

from src.common.clock import Clock, epoch_millis, utc_now
from src.versioning.asset_urls import build_asset_url
from src.versioning.models import (
    CacheStatus,
    VersionComparison,
    VersionDescriptor,
    VersionInfo,
    VersionStrategy,
)
from src.versioning.versioning_config import VersioningConfig

LOGGER = logging.getLogger("versioning")

Fingerprint = bytes | str
FingerprintFn = Callable[[str], Fingerprint | None]

HASH_TOKEN_LENGTH = 16


class VersionConfigurationError(ValueError):
    """Raised when a strategy is requested without the inputs it requires."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


@dataclass
class _PathVersionState:
    version: str
    changed_at: datetime
    invalidated: bool = False
    history: deque[str] = field(default_factory=deque)


def _base36(value: int) -> str:
    return np.base_repr(value, base=36).lower()


def content_hash_token(fingerprint: Fingerprint) -> str:
    raw = fingerprint.encode("utf-8") if isinstance(fingerprint, str) else bytes(fingerprint)
    return hashlib.sha256(raw).hexdigest()[:HASH_TOKEN_LENGTH]


def _is_decimal_token(value: str) -> bool:
    return value.isascii() and value.isdigit()


def compare_versions(version1: str, version2: str) -> VersionComparison:
    """Order two tokens: numerically when both are decimal, else equality then lexicographic."""

    if _is_decimal_token(version1) and _is_decimal_token(version2):
        left, right = int(version1), int(version2)
    else:
        left, right = version1, version2  # type: ignore[assignment]
    if left > right:
        return VersionComparison.NEWER
    if left < right:
        return VersionComparison.OLDER
    return VersionComparison.SAME


class VersionManager:
    """Resolves versioned URLs and tracks the last-known version for each path."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        config: VersioningConfig | None = None,
        clock: Clock = utc_now,
        fingerprint_fn: FingerprintFn | None = None,
    ) -> None:
        self.base_url = base_url
        self.config = config or VersioningConfig()
        self._clock = clock
        self._fingerprint_fn = fingerprint_fn
        self._lock = threading.Lock()
        self._state: dict[str, _PathVersionState] = {}

    def resolve(
        self,
        path: str,
        strategy: VersionStrategy | str = VersionStrategy.TIMESTAMP,
        explicit_version: str | None = None,
        *,
        content_fingerprint: Fingerprint | None = None,
    ) -> VersionDescriptor:
        try:
            strategy = VersionStrategy(strategy)
        except ValueError as exc:
            raise VersionConfigurationError(
                f"unknown versioning strategy {strategy!r}",
                details={"path": path, "strategy": str(strategy)},
            ) from exc
        now = self._clock()
        content_hashed = False

        if strategy is VersionStrategy.TIMESTAMP:
            version = str(epoch_millis(now))
        elif strategy is VersionStrategy.HASH:
            fingerprint = content_fingerprint
            if fingerprint is None and self._fingerprint_fn is not None:
                fingerprint = self._fingerprint_fn(path)
            if fingerprint is not None:
                version = content_hash_token(fingerprint)
                content_hashed = True
            else:
                version = _base36(epoch_millis(now))
                LOGGER.debug("no content fingerprint for %s; using time-derived hash token", path)
        else:
            if explicit_version is None or explicit_version.strip() == "":
                raise VersionConfigurationError(
                    f"{strategy.value} versioning requires an explicit version",
                    details={"path": path, "strategy": strategy.value},
                )
            version = explicit_version.strip()

        self._remember(path, version, changed_at=now, invalidated=False)
        return VersionDescriptor(
            path=path,
            strategy=strategy,
            version=version,
            resolved_url=build_asset_url(path, base_url=self.base_url, version=version),
            content_hashed=content_hashed,
            created_at=now,
        )

    def mark_invalidated(self, path: str) -> VersionDescriptor:
        """Issue a fresh timestamp version for a path whose cached copy was purged."""

        descriptor = self.resolve(path, VersionStrategy.TIMESTAMP)
        with self._lock:
            state = self._state.get(path)
            if state is not None:
                state.invalidated = True
        return descriptor

    def _remember(self, path: str, version: str, *, changed_at: datetime, invalidated: bool) -> None:
        with self._lock:
            state = self._state.get(path)
            if state is None:
                self._state[path] = _PathVersionState(
                    version=version,
                    changed_at=changed_at,
                    invalidated=invalidated,
                    history=deque(maxlen=self.config.version_history_size),
                )
                return
            if state.version != version and self.config.version_history_size > 0:
                state.history.appendleft(state.version)
            state.version = version
            state.changed_at = changed_at
            state.invalidated = invalidated

    def compare(self, version1: str, version2: str) -> VersionComparison:
        return compare_versions(version1, version2)

    def current_version(self, path: str) -> str | None:
        with self._lock:
            state = self._state.get(path)
            return state.version if state else None

    def version_age_ms(self, path: str) -> float | None:
        with self._lock:
            state = self._state.get(path)
            changed_at = state.changed_at if state else None
        if changed_at is None:
            return None
        return (self._clock() - changed_at).total_seconds() * 1000.0

    def needs_invalidation(self, path: str, max_age_ms: float | None = None) -> bool:
        """True when the path has no known version or its version is older than max_age_ms."""

        limit = self.config.default_max_age_ms if max_age_ms is None else max_age_ms
        age_ms = self.version_age_ms(path)
        if age_ms is None:
            return True
        return age_ms > limit

    def get_version_info(self, path: str) -> VersionInfo:
        with self._lock:
            state = self._state.get(path)
            snapshot = (
                (state.version, tuple(state.history), state.changed_at, state.invalidated) if state else None
            )

        if snapshot is None:
            return VersionInfo(
                path=path,
                current_version=None,
                previous_versions=(),
                last_modified=None,
                cache_status=CacheStatus.STALE,
            )

        version, history, changed_at, invalidated = snapshot
        if invalidated:
            status = CacheStatus.INVALIDATED
        elif self.needs_invalidation(path):
            status = CacheStatus.STALE
        else:
            status = CacheStatus.FRESH
        return VersionInfo(
            path=path,
            current_version=version,
            previous_versions=history,
            last_modified=changed_at,
            cache_status=status,
        )

    def forget(self, path: str) -> None:
        with self._lock:
            self._state.pop(path, None)
