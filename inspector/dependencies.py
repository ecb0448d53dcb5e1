from fastapi import Request

from inspector.services.cache_service import CacheService
from inspector.services.inspect_service import InspectService


def get_inspect_service(request: Request) -> InspectService:
    return request.app.state.inspect_service


def get_cache(request: Request) -> CacheService:
    return request.app.state.cache_service
