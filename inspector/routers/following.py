import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from inspector.dependencies import get_inspect_service
from inspector.middleware.validation import (
    error_response,
    validate_cursor,
    validate_fid,
    validate_limit,
)
from inspector.services.inspect_service import InspectService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/following", tags=["following"])


@router.get("")
async def get_following(
    service: Annotated[InspectService, Depends(get_inspect_service)],
    fid: Annotated[str | None, Query()] = None,
    cursor: Annotated[str | None, Query()] = None,
    limit: Annotated[int | None, Query()] = None,
):
    fid_value, err = validate_fid(fid)
    if err:
        return error_response(400, "INVALID_FIELD", err)
    page_size, err = validate_limit(limit)
    if err:
        return error_response(400, "INVALID_FIELD", err)
    cursor, err = validate_cursor(cursor)
    if err:
        return error_response(400, "INVALID_FIELD", err)

    if not service.configured:
        return error_response(503, "NOT_CONFIGURED", "Neynar API key not configured")

    try:
        report = await service.following(fid_value, page_size, cursor)
    except Exception:
        logger.exception("Failed to analyze following list")
        return error_response(500, "INTERNAL_ERROR", "Failed to fetch following list")

    return report.model_dump(by_alias=True, mode="json")
