"""
Scoring Helper Functions and Constants

Contains dimension weights, status thresholds, and utility functions
used across all coverage scoring calculations.
"""

from typing import Any, Dict, List
from enum import Enum


# ============================================================================
# DIMENSION WEIGHTS
# ============================================================================

RECRUITMENT_WEIGHT = 0.55
AWARENESS_WEIGHT = 0.35
FOUNDER_WEIGHT = 0.10

DIMENSION_WEIGHTS: Dict[str, float] = {
    "recruitment": RECRUITMENT_WEIGHT,
    "awareness": AWARENESS_WEIGHT,
    "founder": FOUNDER_WEIGHT,
}


def calculate_overall_score(recruitment: float, awareness: float, founder: float) -> float:
    """
    Combine dimension scores into the overall coverage score.

    Args:
        recruitment: Recruitment score (0-100)
        awareness: Awareness score (0-100)
        founder: Founder score (0-100)

    Returns:
        Unrounded overall score (0-100)
    """
    return (
        recruitment * RECRUITMENT_WEIGHT +
        awareness * AWARENESS_WEIGHT +
        founder * FOUNDER_WEIGHT
    )


# ============================================================================
# STATUS THRESHOLDS
# ============================================================================

class CoverageStatus(Enum):
    """Coverage status buckets."""
    EXCELLENT = "excellent"  # >= 80
    GOOD = "good"            # 60-80
    PARTIAL = "partial"      # 40-60
    MINIMAL = "minimal"      # 20-40
    MISSING = "missing"      # < 20


STATUS_ORDER: List[str] = [status.value for status in CoverageStatus]


def get_status_from_score(score: float) -> CoverageStatus:
    """
    Classify a score into a status bucket.

    Args:
        score: Any 0-100 score (overall, dimension or language)

    Returns:
        CoverageStatus enum
    """
    if score >= 80:
        return CoverageStatus.EXCELLENT
    elif score >= 60:
        return CoverageStatus.GOOD
    elif score >= 40:
        return CoverageStatus.PARTIAL
    elif score >= 20:
        return CoverageStatus.MINIMAL
    else:
        return CoverageStatus.MISSING


# ============================================================================
# RATIO HELPERS
# ============================================================================

def safe_percentage(completed: float, total: float) -> float:
    """completed / total × 100, or 0 when there is nothing to complete."""
    if total <= 0:
        return 0.0
    return (completed / total) * 100


def capped_percentage(completed: float, total: float) -> float:
    """safe_percentage() clamped to 100."""
    return min(100.0, safe_percentage(completed, total))


def round_score(value: float) -> float:
    """Scores are reported with 2 decimals."""
    return round(value, 2)


def calculate_language_score(published: int, target: int) -> float:
    """
    Language score: published articles against a per-language target.

    Args:
        published: Published articles in the language
        target: Published articles that count as 100%

    Returns:
        Score (0-100)
    """
    return capped_percentage(published, target)


# ============================================================================
# AGGREGATION HELPERS
# ============================================================================

def calculate_weighted_average(
    items: List[Dict[str, Any]],
    value_key: str,
    weight_key: str
) -> float:
    """
    Calculate weighted average from list of items.

    Args:
        items: List of dictionaries
        value_key: Key for value to average
        weight_key: Key for weight

    Returns:
        Weighted average (0 when there are no items or no weight)
    """
    if not items:
        return 0.0

    total_weight = sum(item.get(weight_key, 1) for item in items)
    if total_weight == 0:
        return 0.0

    weighted_sum = sum(
        item.get(value_key, 0) * item.get(weight_key, 1)
        for item in items
    )

    return weighted_sum / total_weight


def average(values: List[float]) -> float:
    """Arithmetic mean, 0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)
