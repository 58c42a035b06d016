"""
Intelligent Coverage API

Read-only coverage endpoints for the content dashboard:
- Global dashboard (averages, distribution, top and priority countries)
- Country list with filters, sorting and pagination
- Country details and per-dimension breakdowns
- Founder coverage, language statistics, topic lists
- Global recommendations and the countries × languages matrix
- Generation plan for selected gaps

Every response is wrapped as {"success": true, "data": ...}.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coverage_engine.database.session import get_db
from coverage_engine.scoring import paginate
from coverage_engine.services import CoverageService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/coverage/intelligent", tags=["Coverage Intelligence"])


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_coverage_service(db: Session = Depends(get_db)) -> CoverageService:
    """One service (and one taxonomy registry) per request."""
    return CoverageService(db)


def run_service_call(description: str, call: Callable[[], Any]) -> Any:
    """
    Run a service operation, mapping failures to HTTP errors.

    ValueError (invalid parameters) becomes 422; data-store failures
    become 500.
    """
    try:
        return call()
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"{description} failed: {e}")
        raise HTTPException(status_code=500, detail=f"{description} failed")


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class CoverageResponse(BaseModel):
    """Standard response envelope."""
    success: bool = True
    data: Any = None
    meta: Optional[Dict[str, Any]] = None


class GenerationPlanRequest(BaseModel):
    """Countries, languages and content types to plan production for."""
    platform_id: int = Field(..., description="Platform id (1 = SOS-Expat, 2 = Ulixai)")
    country_ids: List[int] = Field(..., min_length=1, description="Countries to plan for")
    languages: List[str] = Field(..., min_length=1, description="Language codes, e.g. ['fr', 'en']")
    content_types: List[str] = Field(
        ...,
        min_length=1,
        description="Any of recruitment, awareness, founder",
    )


def _platform(service: CoverageService, platform_id: Optional[int]) -> int:
    return platform_id if platform_id is not None else service.settings.DEFAULT_PLATFORM_ID


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/dashboard", response_model=CoverageResponse, response_model_exclude_none=True)
def coverage_dashboard(
    platform_id: Optional[int] = Query(None, description="Platform id"),
    service: CoverageService = Depends(get_coverage_service),
):
    """Global coverage of a platform."""
    platform = _platform(service, platform_id)
    data = run_service_call(
        "Global coverage",
        lambda: service.get_global_coverage(platform),
    )
    return CoverageResponse(data=data)


@router.get("/countries", response_model=CoverageResponse, response_model_exclude_none=True)
def list_countries(
    platform_id: Optional[int] = Query(None),
    region: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="excellent, good, partial, minimal or missing"),
    search: Optional[str] = Query(None, description="Substring of country name or code"),
    sort_by: str = Query("priority_score"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: Optional[int] = Query(None, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=250),
    service: CoverageService = Depends(get_coverage_service),
):
    """All countries with their scores, optionally paginated."""
    platform = _platform(service, platform_id)
    countries = run_service_call(
        "Country list",
        lambda: service.list_countries_with_scores(
            platform,
            region=region,
            status=status,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        ),
    )

    if page is not None or per_page is not None:
        result = paginate(countries, page or 1, per_page or 50)
        return CoverageResponse(data=result["items"], meta=result["meta"])

    return CoverageResponse(data=countries, meta={"total": len(countries)})


@router.get("/countries/{country_id}", response_model=CoverageResponse, response_model_exclude_none=True)
def country_details(
    country_id: int,
    platform_id: Optional[int] = Query(None),
    service: CoverageService = Depends(get_coverage_service),
):
    """Full coverage of one country plus its recent articles."""
    platform = _platform(service, platform_id)
    data = run_service_call(
        "Country details",
        lambda: service.get_country_details(platform, country_id),
    )
    return CoverageResponse(data=data)


@router.get("/countries/{country_id}/recruitment", response_model=CoverageResponse, response_model_exclude_none=True)
def country_recruitment(
    country_id: int,
    platform_id: Optional[int] = Query(None),
    service: CoverageService = Depends(get_coverage_service),
):
    """Recruitment breakdown of one country."""
    platform = _platform(service, platform_id)
    data = run_service_call(
        "Country recruitment",
        lambda: service.get_dimension_view(platform, country_id, "recruitment"),
    )
    return CoverageResponse(data=data)


@router.get("/countries/{country_id}/awareness", response_model=CoverageResponse, response_model_exclude_none=True)
def country_awareness(
    country_id: int,
    platform_id: Optional[int] = Query(None),
    service: CoverageService = Depends(get_coverage_service),
):
    """Awareness breakdown of one country."""
    platform = _platform(service, platform_id)
    data = run_service_call(
        "Country awareness",
        lambda: service.get_dimension_view(platform, country_id, "awareness"),
    )
    return CoverageResponse(data=data)


@router.get("/countries/{country_id}/founder", response_model=CoverageResponse, response_model_exclude_none=True)
def country_founder(
    country_id: int,
    platform_id: Optional[int] = Query(None),
    service: CoverageService = Depends(get_coverage_service),
):
    """Founder breakdown of one country (the same on every platform)."""
    platform = _platform(service, platform_id)
    data = run_service_call(
        "Country founder",
        lambda: service.get_dimension_view(platform, country_id, "founder"),
    )
    return CoverageResponse(data=data)


@router.get("/founder", response_model=CoverageResponse, response_model_exclude_none=True)
def founder_global(service: CoverageService = Depends(get_coverage_service)):
    """Founder coverage of every country."""
    data = run_service_call("Founder coverage", service.get_founder_coverage_global)
    return CoverageResponse(data=data)


@router.get("/languages", response_model=CoverageResponse, response_model_exclude_none=True)
def language_stats(
    platform_id: Optional[int] = Query(None),
    service: CoverageService = Depends(get_coverage_service),
):
    """Per-language article totals and country coverage."""
    platform = _platform(service, platform_id)
    data = run_service_call(
        "Language statistics",
        lambda: service.get_language_stats(platform),
    )
    return CoverageResponse(data=data)


@router.get("/specialties", response_model=CoverageResponse, response_model_exclude_none=True)
def list_specialties(
    type: Optional[str] = Query(
        None,
        description="lawyer_specialty, expat_domain or ulixai_service (default: all)",
    ),
    service: CoverageService = Depends(get_coverage_service),
):
    """Active specialties, expat domains and leaf services."""
    data = run_service_call("Topic list", lambda: service.list_topics(type))
    return CoverageResponse(data=data)


@router.get("/recommendations", response_model=CoverageResponse, response_model_exclude_none=True)
def global_recommendations(
    platform_id: Optional[int] = Query(None),
    limit: int = Query(20, ge=1, le=200),
    priority: Optional[str] = Query(None, pattern="^(critical|high|medium|low)$"),
    service: CoverageService = Depends(get_coverage_service),
):
    """Highest-priority recommendations across countries."""
    platform = _platform(service, platform_id)
    recommendations = run_service_call(
        "Global recommendations",
        lambda: service.get_global_recommendations(platform, limit),
    )
    if priority:
        recommendations = [r for r in recommendations if r["type"] == priority]
    return CoverageResponse(data=recommendations)


@router.get("/matrix", response_model=CoverageResponse, response_model_exclude_none=True)
def coverage_matrix(
    platform_id: Optional[int] = Query(None),
    region: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=250),
    service: CoverageService = Depends(get_coverage_service),
):
    """Countries × languages matrix of language scores."""
    platform = _platform(service, platform_id)
    data = run_service_call(
        "Coverage matrix",
        lambda: service.get_coverage_matrix(platform, region=region, limit=limit),
    )
    return CoverageResponse(data=data)


@router.post("/generate", response_model=CoverageResponse, response_model_exclude_none=True)
def generation_plan(
    request: GenerationPlanRequest,
    service: CoverageService = Depends(get_coverage_service),
):
    """Plan production tasks for the selected countries, languages and types."""
    data = run_service_call(
        "Generation plan",
        lambda: service.build_generation_plan(
            request.platform_id,
            request.country_ids,
            request.languages,
            request.content_types,
        ),
    )
    return CoverageResponse(data=data)
