# This module defines the records exchanged by version resolution and cache invalidation.
# It exists so versioned URLs, version history, and batch outcomes have one closed shape.
# Descriptors say whether a hash version came from real content or from the time-based fallback.
# Batch results keep input order inside each partition so operators can retry deterministically.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class VersionStrategy(str, Enum):
    TIMESTAMP = "timestamp"
    SEMANTIC = "semantic"
    HASH = "hash"
    MANUAL = "manual"


class VersionComparison(str, Enum):
    NEWER = "newer"
    OLDER = "older"
    SAME = "same"


class CacheStatus(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
    INVALIDATED = "invalidated"


class VersionDescriptor(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    strategy: VersionStrategy
    version: str
    resolved_url: str
    content_hashed: bool = False
    created_at: datetime


class VersionInfo(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    current_version: str | None
    previous_versions: tuple[str, ...] = ()
    last_modified: datetime | None
    cache_status: CacheStatus


@dataclass(frozen=True)
class BatchResult:
    successful: tuple[str, ...] = field(default_factory=tuple)
    failed: tuple[str, ...] = field(default_factory=tuple)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {"successful": list(self.successful), "failed": list(self.failed)}
