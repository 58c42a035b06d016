"""
Priority Classifier

Ranks countries for content production (0-100, higher = produce first).

Formula:
    Priority = 50 + (100 - Overall) × 0.3
             + 20 if the country has a large expat population
             + 15 if recruitment < 20
             + 10 if founder < 50
             + 10 if the first lawyer specialty has no published French item

The result is truncated to an integer and clamped to 0-100.
"""

from typing import FrozenSet, Optional

from coverage_engine.coverage.models import CompletionStatus

from .dimensions import DimensionScore

# Countries with a large expat population
HIGH_PRIORITY_COUNTRIES: FrozenSet[str] = frozenset({
    "FR", "US", "GB", "DE", "ES", "CA", "AU", "CH", "BE", "AE",
    "SG", "TH", "PT", "NL", "IT", "JP", "HK", "NZ", "IE", "LU",
})

BASE_PRIORITY = 50
LOW_SCORE_FACTOR = 0.3
HIGH_PRIORITY_COUNTRY_BONUS = 20
CRITICAL_RECRUITMENT_BONUS = 15
FOUNDER_GAP_BONUS = 10
PRIMARY_LANGUAGE_GAP_BONUS = 10

CRITICAL_RECRUITMENT_THRESHOLD = 20
FOUNDER_GAP_THRESHOLD = 50

SPECIALTY_COMPONENT = "lawyer_specialties"
SPECIALTY_CHECK_LANGUAGE = "fr"


def first_specialty_primary_language_missing(
    recruitment: Optional[DimensionScore],
    component_key: str = SPECIALTY_COMPONENT,
    language: str = SPECIALTY_CHECK_LANGUAGE,
) -> bool:
    """
    Whether the first enumerated lawyer specialty lacks a published item in
    French.

    True as well when there is no such breakdown at all (platforms without
    lawyer specialties, empty taxonomy, French missing from the store).
    """
    if recruitment is None:
        return True
    component = recruitment.components.get(component_key)
    if component is None or not component.details:
        return True
    status = component.details[0].languages.get(language, CompletionStatus.MISSING)
    return not status.completed


def calculate_priority_score(
    country_code: Optional[str],
    overall_score: float,
    recruitment_score: float,
    founder_score: float,
    primary_language_missing: bool,
) -> int:
    """
    Calculate production priority for a country.

    Args:
        country_code: ISO country code
        overall_score: Unrounded overall score (0-100)
        recruitment_score: Unrounded recruitment score (0-100)
        founder_score: Unrounded founder score (0-100)
        primary_language_missing: Result of first_specialty_primary_language_missing()

    Returns:
        Priority (0-100)
    """
    priority = BASE_PRIORITY + (100 - overall_score) * LOW_SCORE_FACTOR

    if country_code and country_code.upper() in HIGH_PRIORITY_COUNTRIES:
        priority += HIGH_PRIORITY_COUNTRY_BONUS

    if recruitment_score < CRITICAL_RECRUITMENT_THRESHOLD:
        priority += CRITICAL_RECRUITMENT_BONUS

    if founder_score < FOUNDER_GAP_THRESHOLD:
        priority += FOUNDER_GAP_BONUS

    if primary_language_missing:
        priority += PRIMARY_LANGUAGE_GAP_BONUS

    return min(100, max(0, int(priority)))
