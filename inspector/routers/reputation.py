import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from inspector.config import settings
from inspector.dependencies import get_inspect_service
from inspector.middleware.validation import (
    DEFAULT_RANKINGS_LIMIT,
    error_response,
    validate_fid_list,
    validate_limit,
    validate_ranking_scope,
)
from inspector.services.inspect_service import InspectService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reputation", tags=["reputation"])


@router.get("")
async def get_reputation(
    service: Annotated[InspectService, Depends(get_inspect_service)],
    fids: Annotated[str | None, Query()] = None,
):
    fid_list, err = validate_fid_list(fids, max_fids=settings.max_batch_size)
    if err:
        return error_response(400, "INVALID_FIELD", err)

    try:
        report = await service.reputation(fid_list)
    except Exception:
        logger.exception("Failed to fetch graph reputation")
        return error_response(500, "INTERNAL_ERROR", "Failed to fetch reputation scores")

    return report.model_dump(by_alias=True, mode="json")


@router.get("/rankings")
async def get_rankings(
    service: Annotated[InspectService, Depends(get_inspect_service)],
    scope: Annotated[str | None, Query()] = None,
    fid: Annotated[str | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
):
    """OpenRank leaderboard: scope=global, or followers/following of fid."""
    scope, fid_value, err = validate_ranking_scope(scope, fid)
    if err:
        return error_response(400, "INVALID_FIELD", err)
    page_size, err = validate_limit(limit, default=DEFAULT_RANKINGS_LIMIT)
    if err:
        return error_response(400, "INVALID_FIELD", err)

    try:
        report = await service.rankings(scope, fid_value, page_size)
    except Exception:
        logger.exception("Failed to fetch OpenRank rankings")
        return error_response(500, "INTERNAL_ERROR", "Failed to fetch rankings")

    return report.model_dump(by_alias=True, mode="json")
