import re
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inspector.config import Settings, settings
from inspector.middleware.logging import StructuredLoggingMiddleware, configure_logging
from inspector.middleware.ratelimit import RateLimitMiddleware, configure_rate_limiters
from inspector.routers import following, health, inspect, metrics, reputation
from inspector.services.aggregator import ReputationAggregator
from inspector.services.cache_service import create_cache_service
from inspector.services.inspect_service import InspectService
from inspector.services.providers.dune import DuneLabelsProvider
from inspector.services.providers.neynar import NeynarClient
from inspector.services.providers.openrank import OpenRankProvider
from inspector.services.providers.quotient import QuotientProvider
from inspector.services.providers.talent import TalentProvider

# Initialize structured logging (must be before any logger usage)
configure_logging(log_level=settings.log_level, service="farcaster-inspector")
logger = structlog.get_logger()


def build_inspect_service(config: Settings, client: httpx.AsyncClient) -> InspectService:
    """Wire the provider clients and aggregators from settings."""
    openrank = OpenRankProvider(client, config.openrank_base_url)
    quotient = QuotientProvider(client, config.quotient_api_key, config.quotient_base_url)
    talent = TalentProvider(client, config.talent_api_key, config.talent_base_url)
    dune = DuneLabelsProvider(
        client, config.dune_api_key, config.dune_base_url, config.dune_wallet_query_id
    )

    timeout = config.enrichment_timeout_seconds
    return InspectService(
        neynar=NeynarClient(client, config.neynar_api_key, config.neynar_base_url),
        aggregator=ReputationAggregator([talent, openrank, quotient, dune], timeout=timeout),
        graph_aggregator=ReputationAggregator([openrank, quotient], timeout=timeout),
        cast_limit=config.recent_cast_limit,
        activity_timeout=timeout,
        openrank=openrank,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_seconds, connect=5.0),
        headers={"User-Agent": "farcaster-inspector/0.1"},
    )
    app.state.cache_service = await create_cache_service(
        settings.redis_url, ttl=settings.inspection_cache_ttl
    )
    app.state.inspect_service = build_inspect_service(settings, app.state.http_client)

    if not settings.neynar_api_key:
        logger.warning("NEYNAR_API_KEY is not set; inspection endpoints will return 503")

    yield

    # Shutdown
    await app.state.cache_service.close()
    logger.info("redis connection closed")
    await app.state.http_client.aclose()
    logger.info("http client closed")


app = FastAPI(title="Farcaster Inspector API", version="0.1.0", lifespan=lifespan)

# Middleware stack (last added is outermost)
# Parse CORS origins: exact origins go to allow_origins, wildcard patterns
# (e.g. "http://localhost:*") become a regex.
_cors_exact: list[str] = []
_cors_patterns: list[str] = []
for _o in settings.cors_origins.split(","):
    _o = _o.strip()
    if not _o:
        continue
    if _o.endswith("*"):
        _cors_patterns.append(re.escape(_o.removesuffix("*")) + ".*")
    else:
        _cors_exact.append(_o)

_cors_regex = "|".join(_cors_patterns) if _cors_patterns else None
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_exact if _cors_exact else (["*"] if settings.cors_origins == "*" else []),
    allow_origin_regex=_cors_regex,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Origin", "Content-Type", "Accept"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    max_age=86400,
)
app.add_middleware(RateLimitMiddleware, limiters=configure_rate_limiters(settings))
app.add_middleware(StructuredLoggingMiddleware)
app.add_middleware(metrics.PrometheusMiddleware)

# Warn if wildcard CORS is used in production
if settings.environment == "production" and settings.cors_origins == "*":
    logger.warning("CORS_ORIGINS is set to '*' in production; this allows any website to make API requests")

app.include_router(health.router)
app.include_router(inspect.router)
app.include_router(following.router)
app.include_router(reputation.router)
app.include_router(metrics.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "inspector.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=(settings.environment == "development"),
    )
