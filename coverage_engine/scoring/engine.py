"""
Country Coverage Engine

Scores one (platform, country) pair end to end:

1. Build the target matrix for the platform
2. Score recruitment, awareness and founder against the completion oracle
3. Combine: Overall = Recruitment × 0.55 + Awareness × 0.35 + Founder × 0.10
4. Classify status and production priority, generate recommendations

score_country() is pure: every fact comes from the taxonomy and the oracle
passed in, so the same inputs always give the same result.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from coverage_engine.coverage.models import CountryRef, Dimension
from coverage_engine.coverage.platforms import PlatformProfile
from coverage_engine.coverage.targets import build_target_matrix

from .dimensions import (
    DimensionScore,
    LanguageScore,
    empty_dimension,
    score_awareness,
    score_founder,
    score_languages,
    score_recruitment,
)
from .helpers import calculate_overall_score, get_status_from_score, round_score
from .priority import calculate_priority_score, first_specialty_primary_language_missing
from .recommendations import Recommendation, RecommendationContext, generate_recommendations

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE_TARGET = 50
DEFAULT_FOUNDER_NAME = "Williams Jullin"


@dataclass
class CountryCoverage:
    """Complete coverage analysis of one country on one platform."""
    platform_id: int
    country: CountryRef
    recruitment: DimensionScore
    awareness: DimensionScore
    founder: DimensionScore
    overall_score: float  # Unrounded
    priority_score: int
    language_scores: Dict[str, LanguageScore] = field(default_factory=dict)
    recommendations: List[Recommendation] = field(default_factory=list)
    total_articles: int = 0
    published_articles: int = 0
    founder_name: str = DEFAULT_FOUNDER_NAME

    @property
    def status(self) -> str:
        return get_status_from_score(self.overall_score).value

    @property
    def unpublished_articles(self) -> int:
        return self.total_articles - self.published_articles

    @property
    def total_targets(self) -> int:
        return self.recruitment.total_targets + self.awareness.total_targets + self.founder.total_targets

    @property
    def completed_targets(self) -> int:
        return (
            self.recruitment.completed_targets
            + self.awareness.completed_targets
            + self.founder.completed_targets
        )

    @property
    def missing_targets(self) -> int:
        return self.total_targets - self.completed_targets

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the serialisable result shape (scores rounded to 2 decimals)."""
        return {
            "platform_id": self.platform_id,
            "country_id": self.country.id,
            "country_name": self.country.name,
            "country_code": self.country.code,
            "region": self.country.region,
            "recruitment_score": round_score(self.recruitment.score),
            "awareness_score": round_score(self.awareness.score),
            "founder_score": round_score(self.founder.score),
            "overall_score": round_score(self.overall_score),
            "recruitment_breakdown": self.recruitment.breakdown(),
            "awareness_breakdown": self.awareness.breakdown(),
            "founder_breakdown": self.founder.breakdown(),
            "founder_name": self.founder_name,
            "language_scores": {code: score.to_dict() for code, score in self.language_scores.items()},
            "total_articles": self.total_articles,
            "published_articles": self.published_articles,
            "unpublished_articles": self.unpublished_articles,
            "total_targets": self.total_targets,
            "completed_targets": self.completed_targets,
            "missing_targets": self.missing_targets,
            "priority_score": self.priority_score,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "status": self.status,
        }


def empty_country_coverage(platform_id: int, country_id: int) -> CountryCoverage:
    """Well-formed zero result for a country that does not exist."""
    return CountryCoverage(
        platform_id=platform_id,
        country=CountryRef(id=country_id, code="", name="Unknown", region=""),
        recruitment=empty_dimension(Dimension.RECRUITMENT),
        awareness=empty_dimension(Dimension.AWARENESS),
        founder=empty_dimension(Dimension.FOUNDER),
        overall_score=0.0,
        priority_score=0,
    )


def score_country(
    country: Optional[CountryRef],
    profile: PlatformProfile,
    taxonomy,
    oracle,
    country_id: Optional[int] = None,
    language_target: int = DEFAULT_LANGUAGE_TARGET,
    founder_name: str = DEFAULT_FOUNDER_NAME,
) -> CountryCoverage:
    """
    Calculate the complete coverage of one country.

    Args:
        country: Country reference data (None when the country is unknown)
        profile: Platform profile
        taxonomy: TaxonomyRegistry of the current unit of work
        oracle: CompletionOracle built for the country
        country_id: Requested id, reported when the country is unknown
        language_target: Published articles per language counting as 100%
        founder_name: Display name used in the founder recommendation

    Returns:
        CountryCoverage with scores, breakdowns, priority and recommendations
    """
    if country is None:
        logger.warning(f"Country {country_id} not found, returning empty coverage")
        return empty_country_coverage(profile.id, country_id or 0)

    matrix = build_target_matrix(profile, taxonomy)

    recruitment = score_recruitment(matrix, oracle, profile)
    awareness = score_awareness(matrix, oracle)
    founder = score_founder(matrix, oracle)

    overall = calculate_overall_score(recruitment.score, awareness.score, founder.score)

    language_scores = score_languages(oracle, profile.id, taxonomy.languages(), language_target)
    published, total = oracle.article_counts(profile.id)

    priority = calculate_priority_score(
        country.code,
        overall,
        recruitment.score,
        founder.score,
        first_specialty_primary_language_missing(recruitment),
    )

    recommendations = generate_recommendations(RecommendationContext(
        profile=profile,
        recruitment=recruitment,
        awareness=awareness,
        founder=founder,
        language_scores=language_scores,
        founder_name=founder_name,
    ))

    logger.debug(
        f"Scored country {country.code or country.id} on platform {profile.id}: "
        f"overall={overall:.2f}, priority={priority}"
    )

    return CountryCoverage(
        platform_id=profile.id,
        country=country,
        recruitment=recruitment,
        awareness=awareness,
        founder=founder,
        overall_score=overall,
        priority_score=priority,
        language_scores=language_scores,
        recommendations=recommendations,
        total_articles=total,
        published_articles=published,
        founder_name=founder_name,
    )
