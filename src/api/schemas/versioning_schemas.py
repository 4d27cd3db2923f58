# This file defines versioning endpoint schemas for version resolution and invalidation.
# It exists so asset publishers and operators get typed request and response contracts.
# Request models reject unknown fields so misspelled options fail loudly instead of being ignored.
# Batch responses mirror the in-process BatchResult partition one-to-one.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.api.schemas.common import EnvelopeFields
from src.versioning.models import CacheStatus, VersionStrategy


class VersionResolveRequestV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str = Field(min_length=1)
    strategy: VersionStrategy = VersionStrategy.TIMESTAMP
    version: str | None = None
    content_fingerprint: str | None = None


class VersionDescriptorV1(BaseModel):
    path: str
    strategy: VersionStrategy
    version: str
    resolved_url: str
    content_hashed: bool
    created_at: datetime


class VersionResolveResponseV1(EnvelopeFields):
    data: VersionDescriptorV1


class VersionCompareV1(BaseModel):
    version1: str
    version2: str
    result: str


class VersionCompareResponseV1(EnvelopeFields):
    data: VersionCompareV1


class BatchInvalidateRequestV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    paths: list[str] = Field(min_length=1)


class BatchResultV1(BaseModel):
    successful: list[str]
    failed: list[str]


class BatchInvalidateResponseV1(EnvelopeFields):
    data: BatchResultV1


class VersionInfoV1(BaseModel):
    path: str
    current_version: str | None
    previous_versions: list[str]
    last_modified: datetime | None
    cache_status: CacheStatus


class VersionInfoResponseV1(EnvelopeFields):
    data: VersionInfoV1
