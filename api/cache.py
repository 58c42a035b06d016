"""
Coverage Cache API

Provides endpoints for cache monitoring and manual operations.

Endpoints:
- Health check for monitoring/alerting
- Statistics for dashboard insights
- Manual invalidation after bulk imports or taxonomy edits
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from coverage_engine.cache import CacheEvent, get_score_cache
from coverage_engine.services import CoverageService

from .coverage import get_coverage_service


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/coverage/cache", tags=["Coverage Cache"])


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class InvalidationRequest(BaseModel):
    """
    Scope of a manual invalidation.

    platform_id and country_id: that country plus the platform's global entry.
    platform_id only: the platform's global entry.
    Neither: every coverage entry.
    """
    platform_id: Optional[int] = Field(default=None, description="Platform id")
    country_id: Optional[int] = Field(default=None, description="Country id (requires platform_id)")


class InvalidationResponse(BaseModel):
    """Cache invalidation response."""
    success: bool
    event: str
    keys_invalidated: int
    duration_ms: float


class CacheHealthResponse(BaseModel):
    """Cache health check response."""
    healthy: bool
    status: str = Field(..., description="Backend status (connected, memory, disabled, error)")
    latency_ms: Optional[float] = None
    stats: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/invalidate", response_model=InvalidationResponse)
def invalidate_cache(
    request: InvalidationRequest,
    service: CoverageService = Depends(get_coverage_service),
):
    """
    Invalidate cached coverage results.

    Use after bulk article imports or taxonomy changes so the dashboard
    reflects them before the TTL expires.
    """
    if request.country_id is not None and request.platform_id is None:
        raise HTTPException(status_code=422, detail="country_id requires platform_id")

    event = (
        CacheEvent.MANUAL_INVALIDATE
        if request.platform_id is not None
        else CacheEvent.MANUAL_INVALIDATE_ALL
    )

    try:
        result = service.handle_content_event(event, request.platform_id, request.country_id)
    except SQLAlchemyError as e:
        logger.error(f"Cache invalidation failed: {e}")
        raise HTTPException(status_code=500, detail="Cache invalidation failed")

    return InvalidationResponse(
        success=True,
        event=result.event.value,
        keys_invalidated=result.keys_invalidated,
        duration_ms=result.duration_ms,
    )


@router.get("/stats")
def cache_stats() -> Dict[str, Any]:
    """
    Get cache statistics.

    Returns hits, misses, errors and hit rate since process start.
    """
    return get_score_cache().get_stats()


@router.get("/health", response_model=CacheHealthResponse)
def cache_health_check():
    """
    Check cache backend health.

    Returns 503 when the backend cannot be reached. Coverage endpoints keep
    working in that state, computing every result.
    """
    health = get_score_cache().health_check()
    if not health["healthy"]:
        logger.warning(f"Cache health check failed: {health.get('status')}")
        raise HTTPException(status_code=503, detail=health)
    return CacheHealthResponse(**health)
