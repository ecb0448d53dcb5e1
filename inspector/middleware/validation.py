"""Input validation for FID parameters."""

import re

from fastapi.responses import JSONResponse

from inspector.services.providers.openrank import RANKING_SCOPES

MAX_FIDS = 100
MAX_PAGE_LIMIT = 100
MAX_CURSOR_LEN = 512
DEFAULT_RANKINGS_LIMIT = 50

FID_RE = re.compile(r"^[0-9]+$")
CURSOR_RE = re.compile(r"^[A-Za-z0-9_=+/-]+$")


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """Return a standard API error response."""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


def validate_fid(fid: str | None) -> tuple[int, str | None]:
    """Validate a single FID. Returns (fid, error_message)."""
    fid = fid.strip() if fid else ""
    if not fid:
        return 0, "fid is required"
    if not FID_RE.match(fid):
        return 0, f"fid must be a positive integer, got {fid[:20]!r}"
    value = int(fid)
    if value <= 0:
        return 0, "fid must be a positive integer"
    return value, None


def validate_fid_list(fids: str | None, max_fids: int = MAX_FIDS) -> tuple[list[int], str | None]:
    """Validate a comma-separated FID list. Duplicates are dropped, order kept."""
    parts = [p.strip() for p in (fids or "").split(",") if p.strip()]
    if not parts:
        return [], "at least one fid is required"

    result: list[int] = []
    for part in parts:
        value, err = validate_fid(part)
        if err:
            return [], err
        if value not in result:
            result.append(value)

    if len(result) > max_fids:
        return [], f"at most {max_fids} fids per request"
    return result, None


def validate_limit(limit: int | None, default: int = MAX_PAGE_LIMIT) -> tuple[int, str | None]:
    """Validate a page size. Values above the maximum are capped."""
    if limit is None:
        return default, None
    if limit <= 0:
        return 0, "limit must be positive"
    return min(limit, MAX_PAGE_LIMIT), None


def validate_cursor(cursor: str | None) -> tuple[str | None, str | None]:
    """Validate an opaque pagination cursor. Returns (cursor, error_message)."""
    cursor = cursor.strip() if cursor else ""
    if not cursor:
        return None, None
    if len(cursor) > MAX_CURSOR_LEN:
        return None, "cursor is too long"
    if not CURSOR_RE.match(cursor):
        return None, "cursor contains invalid characters"
    return cursor, None


def validate_ranking_scope(scope: str | None, fid: str | None) -> tuple[str, int | None, str | None]:
    """Validate a rankings scope and the fid it needs. Returns (scope, fid, error_message)."""
    scope = (scope or "global").strip().lower()
    if scope not in RANKING_SCOPES:
        return "", None, f"scope must be one of {', '.join(RANKING_SCOPES)}"
    if scope == "global":
        return scope, None, None
    value, err = validate_fid(fid)
    if err:
        return "", None, f"{scope} rankings: {err}"
    return scope, value, None
