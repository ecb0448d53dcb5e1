import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from inspector.config import settings
from inspector.dependencies import get_cache, get_inspect_service
from inspector.middleware.validation import error_response, validate_fid_list
from inspector.models.report import ManualInspectionRequest
from inspector.services.cache_service import CacheService
from inspector.services.inspect_service import InspectService, score_manual

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inspect", tags=["inspect"])


@router.get("")
async def inspect(
    service: Annotated[InspectService, Depends(get_inspect_service)],
    cache: Annotated[CacheService, Depends(get_cache)],
    fid: Annotated[str | None, Query()] = None,
    fids: Annotated[str | None, Query()] = None,
    batch: Annotated[bool, Query()] = False,
):
    fid_list, err = validate_fid_list(fid or fids, max_fids=settings.max_batch_size)
    if err:
        return error_response(400, "INVALID_FIELD", err)

    if not service.configured:
        return error_response(503, "NOT_CONFIGURED", "Neynar API key not configured")

    # Cache-aside: check cache first
    cached = await cache.get_report(fid_list, batch)
    if cached is not None:
        return cached

    try:
        report = await service.inspect(fid_list, batch=batch)
    except Exception:
        logger.exception("Failed to inspect fids")
        return error_response(500, "INTERNAL_ERROR", "Failed to inspect accounts")

    result = report.model_dump(by_alias=True, mode="json")
    if report.users and not report.degraded:
        await cache.set_report(fid_list, batch, result)
    return result


@router.post("/manual")
async def inspect_manual(body: ManualInspectionRequest):
    """Score a profile supplied by the caller, for when upstream lookups are
    unavailable on the configured plan."""
    verdict = score_manual(body)
    return {
        "fid": body.profile.fid,
        "verdict": verdict.model_dump(by_alias=True, mode="json"),
    }
