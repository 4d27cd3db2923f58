# This module coordinates cache invalidation for one or many image paths.
# It exists so a single unreachable path can never abort or corrupt a larger purge batch.
# The actual purge is delegated to an injected collaborator; failures are logged and reported as data.
# Batches fan out on asyncio with a concurrency bound and a per-path timeout, then partition by outcome.

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from concurrent.futures import ThreadPoolExecutor

from src.monitoring.instrumentation import IMAGE_INVALIDATIONS_TOTAL
from src.versioning.models import BatchResult
from src.versioning.version_manager import VersionManager

LOGGER = logging.getLogger("versioning")

PurgeFn = Callable[[str], Awaitable[bool] | bool]


class InvalidationCoordinator:
    def __init__(
        self,
        purge_fn: PurgeFn,
        version_manager: VersionManager,
        *,
        max_concurrency: int | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        config = version_manager.config
        self._purge_fn = purge_fn
        self.version_manager = version_manager
        self.max_concurrency = max(1, int(max_concurrency or config.purge_max_concurrency))
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else config.purge_timeout_seconds
        # Sync purges that outlive their timeout keep a worker busy; the pool caps how many can pile up.
        self._executor = ThreadPoolExecutor(max_workers=self.max_concurrency, thread_name_prefix="cdn-purge")

    def close(self, *, wait: bool = False) -> None:
        """Stop accepting sync purges and drop any still queued."""

        self._executor.shutdown(wait=wait, cancel_futures=True)

    async def _call_purge(self, path: str) -> bool:
        if inspect.iscoroutinefunction(self._purge_fn):
            return bool(await self._purge_fn(path))
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(self._executor, self._purge_fn, path)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    async def invalidate(self, path: str) -> bool:
        """Purge one path. Never raises; returns False on any collaborator failure."""

        try:
            purged = await asyncio.wait_for(self._call_purge(path), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            LOGGER.error("cache invalidation timed out path=%s timeout_s=%.1f", path, self.timeout_seconds)
            IMAGE_INVALIDATIONS_TOTAL.labels(outcome="timeout").inc()
            return False
        except Exception as exc:
            LOGGER.error("cache invalidation failed path=%s error=%s", path, exc)
            IMAGE_INVALIDATIONS_TOTAL.labels(outcome="error").inc()
            return False

        if not purged:
            LOGGER.warning("purge collaborator rejected invalidation path=%s", path)
            IMAGE_INVALIDATIONS_TOTAL.labels(outcome="rejected").inc()
            return False

        descriptor = self.version_manager.mark_invalidated(path)
        IMAGE_INVALIDATIONS_TOTAL.labels(outcome="success").inc()
        LOGGER.info("cache invalidated path=%s new_url=%s", path, descriptor.resolved_url)
        return True

    async def batch_invalidate(self, paths: Iterable[str]) -> BatchResult:
        """Invalidate every distinct path concurrently and partition outcomes in input order."""

        ordered = list(dict.fromkeys(paths))
        if not ordered:
            return BatchResult()

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(path: str) -> bool:
            async with semaphore:
                return await self.invalidate(path)

        outcomes = await asyncio.gather(*(_bounded(path) for path in ordered), return_exceptions=True)

        successful: list[str] = []
        failed: list[str] = []
        for path, outcome in zip(ordered, outcomes, strict=True):
            if outcome is True:
                successful.append(path)
            else:
                if isinstance(outcome, BaseException):
                    LOGGER.error("invalidation task crashed path=%s error=%r", path, outcome)
                failed.append(path)

        LOGGER.info("batch invalidation finished successful=%d failed=%d", len(successful), len(failed))
        return BatchResult(successful=tuple(successful), failed=tuple(failed))

    async def smart_invalidate(
        self,
        path: str,
        *,
        max_age_ms: float | None = None,
        force_invalidation: bool = False,
    ) -> bool:
        """Invalidate when forced or when the path's version is older than max_age_ms."""

        if force_invalidation or self.version_manager.needs_invalidation(path, max_age_ms):
            return await self.invalidate(path)
        return False
