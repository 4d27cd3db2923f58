# This file defines versioning and cache invalidation endpoints under the versioned API path.
# It exists so publishers can mint cache-busted URLs and operators can purge stale assets in bulk.
# Semantic and manual strategies without a version fail with a typed 422 instead of a silent fallback.
# Batch invalidation always answers with the full success/failure partition, even when some paths fail.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.api.api_config import ApiConfig
from src.api.dependencies import get_config, get_invalidation_coordinator, get_version_manager
from src.api.error_handlers import APIError
from src.api.response_envelope import build_object_envelope
from src.api.schemas.common import ErrorResponse
from src.api.schemas.versioning_schemas import (
    BatchInvalidateRequestV1,
    BatchInvalidateResponseV1,
    VersionCompareResponseV1,
    VersionInfoResponseV1,
    VersionResolveRequestV1,
    VersionResolveResponseV1,
)
from src.versioning.invalidation import InvalidationCoordinator
from src.versioning.version_manager import VersionManager

router = APIRouter(tags=["versioning"])
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
VersionManagerDep = Annotated[VersionManager, Depends(get_version_manager)]
CoordinatorDep = Annotated[InvalidationCoordinator | None, Depends(get_invalidation_coordinator)]


@router.post(
    "/versions/resolve",
    response_model=VersionResolveResponseV1,
    responses={422: {"model": ErrorResponse}},
)
def versions_resolve(
    payload: VersionResolveRequestV1,
    request: Request,
    config: ConfigDep,
    version_manager: VersionManagerDep,
) -> dict[str, object]:
    descriptor = version_manager.resolve(
        payload.path,
        payload.strategy,
        payload.version,
        content_fingerprint=payload.content_fingerprint,
    )
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=descriptor.model_dump(),
    )


@router.get("/versions/compare", response_model=VersionCompareResponseV1)
def versions_compare(
    request: Request,
    config: ConfigDep,
    version_manager: VersionManagerDep,
    version1: str = Query(min_length=1),
    version2: str = Query(min_length=1),
) -> dict[str, object]:
    result = version_manager.compare(version1, version2)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data={"version1": version1, "version2": version2, "result": result.value},
    )


@router.post(
    "/invalidations",
    response_model=BatchInvalidateResponseV1,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def invalidations_batch(
    payload: BatchInvalidateRequestV1,
    request: Request,
    config: ConfigDep,
    coordinator: CoordinatorDep,
) -> dict[str, object]:
    if coordinator is None:
        raise APIError(
            status_code=503,
            error_code="PURGE_NOT_CONFIGURED",
            message="Cache invalidation is unavailable because CDN_PURGE_URL is not configured.",
        )
    if len(payload.paths) > config.max_batch_paths:
        raise APIError(
            status_code=400,
            error_code="BATCH_TOO_LARGE",
            message=f"At most {config.max_batch_paths} paths may be invalidated per request.",
            details={"requested": len(payload.paths)},
        )

    result = await coordinator.batch_invalidate(payload.paths)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=result.to_dict(),
        warnings=[f"{len(result.failed)} path(s) failed invalidation"] if result.failed else None,
    )


@router.get("/versions/info", response_model=VersionInfoResponseV1)
def versions_info(
    request: Request,
    config: ConfigDep,
    version_manager: VersionManagerDep,
    path: str = Query(min_length=1),
) -> dict[str, object]:
    info = version_manager.get_version_info(path)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data={**info.model_dump(), "previous_versions": list(info.previous_versions)},
    )
