"""Prometheus metrics endpoint and collectors.

Metrics exposed:
  inspector_api_request_duration_seconds{endpoint,method,status}  Histogram
  inspector_requests_in_flight                                   Gauge
  inspector_inspections_total{mode}                              Counter
  inspector_provider_outcomes_total{provider,outcome}            Counter
  inspector_spam_score                                           Histogram
  inspector_cache_hits_total                                     Counter
  inspector_cache_misses_total                                   Counter
"""

import time

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

router = APIRouter(tags=["metrics"])

# ── Collectors ──

request_duration = Histogram(
    "inspector_api_request_duration_seconds",
    "HTTP request duration in seconds, by endpoint and method.",
    ["endpoint", "method", "status"],
)

requests_in_flight = Gauge(
    "inspector_requests_in_flight",
    "Number of HTTP requests currently being served.",
)

inspections_total = Counter(
    "inspector_inspections_total",
    "Accounts scored, by mode (full, batch, following, manual).",
    ["mode"],
)

provider_outcomes = Counter(
    "inspector_provider_outcomes_total",
    "Upstream provider calls, by provider and outcome.",
    ["provider", "outcome"],
)

spam_scores = Histogram(
    "inspector_spam_score",
    "Distribution of computed spam scores.",
    buckets=(0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
)

cache_hits = Counter(
    "inspector_cache_hits_total",
    "Total Redis cache hits.",
)

cache_misses = Counter(
    "inspector_cache_misses_total",
    "Total Redis cache misses.",
)


# ── Metrics endpoint ──


@router.get("/metrics")
async def metrics_endpoint():
    """Serve Prometheus metrics."""
    output = generate_latest()
    return PlainTextResponse(content=output, media_type=CONTENT_TYPE_LATEST)


# ── Middleware ──


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Records request duration and in-flight count for Prometheus."""

    async def dispatch(self, request: Request, call_next) -> Response:
        # Don't instrument the /metrics endpoint itself
        if request.url.path == "/metrics":
            return await call_next(request)

        requests_in_flight.inc()
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            requests_in_flight.dec()

        duration = time.perf_counter() - start
        request_duration.labels(
            endpoint=_route_template(request),
            method=request.method,
            status=str(response.status_code),
        ).observe(duration)

        return response


def _route_template(request: Request) -> str:
    """Path template of the matched route, so label values stay bounded."""
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", "unmatched")
    return "unmatched"
