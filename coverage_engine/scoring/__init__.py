"""
Scoring Module for the Coverage Engine

This module provides the coverage calculations of one country and their
global aggregation:

1. **Dimension Scores** (0-100)
   Recruitment (topics × languages), Awareness (per-language quotas) and
   Founder (one slot per founder platform and language).

2. **Overall Score** (0-100)
   Overall = Recruitment × 0.55 + Awareness × 0.35 + Founder × 0.10,
   classified into excellent / good / partial / minimal / missing.

3. **Priority Score** (0-100)
   Production priority from the overall score, high-value country list and
   critical gaps.

4. **Recommendations**
   Declarative rule table, top 10 by priority.

Example Usage:
    from coverage_engine.scoring import score_country

    coverage = score_country(country, profile, taxonomy, oracle)
    print(f"Overall: {coverage.overall_score:.2f} ({coverage.status})")
    print(f"Priority: {coverage.priority_score}")
"""

# Helper utilities and constants
from .helpers import (
    DIMENSION_WEIGHTS,
    RECRUITMENT_WEIGHT,
    AWARENESS_WEIGHT,
    FOUNDER_WEIGHT,
    CoverageStatus,
    STATUS_ORDER,
    get_status_from_score,
    calculate_overall_score,
    calculate_language_score,
    calculate_weighted_average,
    safe_percentage,
    round_score,
)

# Dimension scorers
from .dimensions import (
    TopicCoverage,
    QuotaProgress,
    FounderLanguageCoverage,
    ComponentScore,
    DimensionScore,
    LanguageScore,
    score_recruitment,
    score_awareness,
    score_founder,
    score_languages,
)

# Priority
from .priority import (
    HIGH_PRIORITY_COUNTRIES,
    calculate_priority_score,
    first_specialty_primary_language_missing,
)

# Recommendations
from .recommendations import (
    MAX_RECOMMENDATIONS,
    RECOMMENDATION_RULES,
    Recommendation,
    RecommendationContext,
    RecommendationType,
    generate_recommendations,
)

# Country engine
from .engine import (
    CountryCoverage,
    empty_country_coverage,
    score_country,
)

# Global aggregation
from .aggregation import (
    to_list_entry,
    summarize_global_coverage,
    filter_and_sort_countries,
    paginate,
    build_language_stats,
    collect_global_recommendations,
    summarize_founder_coverage,
    build_matrix_rows,
    plan_generation_tasks,
    GENERATION_CONTENT_TYPES,
)

__all__ = [
    # Helpers
    "DIMENSION_WEIGHTS",
    "RECRUITMENT_WEIGHT",
    "AWARENESS_WEIGHT",
    "FOUNDER_WEIGHT",
    "CoverageStatus",
    "STATUS_ORDER",
    "get_status_from_score",
    "calculate_overall_score",
    "calculate_language_score",
    "calculate_weighted_average",
    "safe_percentage",
    "round_score",

    # Dimensions
    "TopicCoverage",
    "QuotaProgress",
    "FounderLanguageCoverage",
    "ComponentScore",
    "DimensionScore",
    "LanguageScore",
    "score_recruitment",
    "score_awareness",
    "score_founder",
    "score_languages",

    # Priority
    "HIGH_PRIORITY_COUNTRIES",
    "calculate_priority_score",
    "first_specialty_primary_language_missing",

    # Recommendations
    "MAX_RECOMMENDATIONS",
    "RECOMMENDATION_RULES",
    "Recommendation",
    "RecommendationContext",
    "RecommendationType",
    "generate_recommendations",

    # Engine
    "CountryCoverage",
    "empty_country_coverage",
    "score_country",

    # Aggregation
    "to_list_entry",
    "summarize_global_coverage",
    "filter_and_sort_countries",
    "paginate",
    "build_language_stats",
    "collect_global_recommendations",
    "summarize_founder_coverage",
    "build_matrix_rows",
    "plan_generation_tasks",
    "GENERATION_CONTENT_TYPES",
]
