"""Health check endpoints: liveness and readiness checks."""

import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from inspector.config import settings

router = APIRouter(tags=["health"])

_start_time: float = time.time()


@router.get("/health/live")
async def live():
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(request: Request):
    checks: dict = {}
    overall_status = "healthy"

    # Neynar is required; every other provider is optional enrichment.
    checks["providers"] = {
        "neynar": _key_status(settings.neynar_api_key),
        "talent": _key_status(settings.talent_api_key),
        "quotient": _key_status(settings.quotient_api_key),
        "dune": _key_status(settings.dune_api_key),
        "openrank": "configured",
    }
    if checks["providers"]["neynar"] != "configured":
        overall_status = "degraded"

    # Redis check
    cache_svc = getattr(request.app.state, "cache_service", None)
    rdb = cache_svc.client if cache_svc else None
    if rdb is not None:
        checks["redis"] = await _check_redis(rdb)
    else:
        checks["redis"] = {"status": "disabled"}

    if checks["redis"].get("status") not in ("up", "disabled") and overall_status == "healthy":
        overall_status = "degraded"

    uptime_seconds = int(time.time() - _start_time)

    resp = {
        "status": overall_status,
        "checks": checks,
        "uptime_seconds": uptime_seconds,
        "version": "0.1.0",
    }

    status_code = 200 if overall_status == "healthy" else 503
    return JSONResponse(content=resp, status_code=status_code)


def _key_status(key: str) -> str:
    return "configured" if key else "missing"


async def _check_redis(rdb) -> dict:
    start = time.time()
    try:
        await rdb.ping()
        latency_ms = int((time.time() - start) * 1000)
        return {"status": "up", "latency_ms": latency_ms}
    except Exception as e:
        latency_ms = int((time.time() - start) * 1000)
        return {"status": "down", "latency_ms": latency_ms, "error": str(e)}
