"""
Recommendation Generator

Builds the prioritized action list of one country from its scores.

Rules are a declarative table evaluated in order; every rule may emit any
number of recommendations. The combined list is sorted once by priority
(descending, stable, so rule order breaks ties) and truncated to
MAX_RECOMMENDATIONS.

| action               | type     | priority | condition                              |
|----------------------|----------|----------|----------------------------------------|
| generate_content     | critical | 100      | primary language score < 30            |
| generate_founder     | high     | 90       | founder < 50                           |
| generate_recruitment | critical | 95       | recruitment < 20                       |
| generate_specialty   | high     | 80       | recommended topic progress < 30        |
| generate_awareness   | medium   | 60       | awareness < 30                         |
| translate_content    | low      | 40       | secondary language score < 20          |
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from coverage_engine.coverage.platforms import (
    AWARENESS_COMPONENTS,
    PRIMARY_LANGUAGES,
    SECONDARY_LANGUAGES,
    PlatformProfile,
)

from .dimensions import DimensionScore, LanguageScore, get_language_score

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 10


class RecommendationType(Enum):
    """Urgency of a recommendation."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class Recommendation:
    """A single suggested production action."""
    type: RecommendationType
    priority: int
    action: str
    message: str
    impact: str
    language: Optional[str] = None
    estimated_articles: Optional[int] = None
    target_type: Optional[str] = None
    target_id: Optional[int] = None
    target_name: Optional[str] = None
    missing_languages: Optional[List[str]] = None
    suggested_types: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, leaving out fields the action does not use."""
        data: Dict[str, Any] = {
            "type": self.type.value,
            "priority": self.priority,
            "action": self.action,
        }
        for key in ("language", "target_type", "target_id", "target_name"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data["message"] = self.message
        for key in ("missing_languages", "suggested_types"):
            value = getattr(self, key)
            if value is not None:
                data[key] = list(value)
        data["impact"] = self.impact
        if self.estimated_articles is not None:
            data["estimated_articles"] = self.estimated_articles
        return data


@dataclass
class RecommendationContext:
    """Everything the rules look at for one country."""
    profile: PlatformProfile
    recruitment: DimensionScore
    awareness: DimensionScore
    founder: DimensionScore
    language_scores: Dict[str, LanguageScore] = field(default_factory=dict)
    founder_name: str = "the founder"


# ============================================================================
# RULES
# ============================================================================

def primary_language_rule(ctx: RecommendationContext) -> List[Recommendation]:
    return [
        Recommendation(
            type=RecommendationType.CRITICAL,
            priority=100,
            action="generate_content",
            language=code,
            message=f"Create base content in {code.upper()}",
            impact="+15-20% overall score",
            estimated_articles=10,
        )
        for code in PRIMARY_LANGUAGES
        if get_language_score(ctx.language_scores, code) < 30
    ]


def founder_rule(ctx: RecommendationContext) -> List[Recommendation]:
    if ctx.founder.score >= 50:
        return []
    return [Recommendation(
        type=RecommendationType.HIGH,
        priority=90,
        action="generate_founder",
        message=f"Create articles about {ctx.founder_name} (founder)",
        impact="+5-10% overall score",
        estimated_articles=ctx.founder.total_targets,
    )]


def recruitment_rule(ctx: RecommendationContext) -> List[Recommendation]:
    if ctx.recruitment.score >= 20:
        return []
    return [Recommendation(
        type=RecommendationType.CRITICAL,
        priority=95,
        action="generate_recruitment",
        message="Critical recruitment gap: complete specialties and services",
        impact="+20-30% recruitment score",
        estimated_articles=20,
    )]


def topic_rule(ctx: RecommendationContext) -> List[Recommendation]:
    component_key = ctx.profile.recommendation_component
    if not component_key:
        return []
    component = ctx.recruitment.components.get(component_key)
    if component is None or not component.details:
        return []

    return [
        Recommendation(
            type=RecommendationType.HIGH,
            priority=80,
            action="generate_specialty",
            target_type=topic.topic.kind.value,
            target_id=topic.topic.id,
            target_name=topic.topic.name,
            message=f"Complete: {topic.topic.name}",
            missing_languages=topic.missing_languages,
            impact="+5-10% recruitment score",
        )
        for topic in component.details
        if topic.progress < 30
    ]


def awareness_rule(ctx: RecommendationContext) -> List[Recommendation]:
    if ctx.awareness.score >= 30:
        return []
    return [Recommendation(
        type=RecommendationType.MEDIUM,
        priority=60,
        action="generate_awareness",
        message="Improve awareness with pillar articles",
        impact="+10-15% awareness score",
        suggested_types=[component.content_type for component in AWARENESS_COMPONENTS],
    )]


def secondary_language_rule(ctx: RecommendationContext) -> List[Recommendation]:
    return [
        Recommendation(
            type=RecommendationType.LOW,
            priority=40,
            action="translate_content",
            language=code,
            message=f"Translate content into {code.upper()}",
            impact="+5-8% overall score",
        )
        for code in SECONDARY_LANGUAGES
        if get_language_score(ctx.language_scores, code) < 20
    ]


RecommendationRule = Callable[[RecommendationContext], List[Recommendation]]

RECOMMENDATION_RULES: List[RecommendationRule] = [
    primary_language_rule,
    founder_rule,
    recruitment_rule,
    topic_rule,
    awareness_rule,
    secondary_language_rule,
]


def generate_recommendations(
    ctx: RecommendationContext,
    rules: List[RecommendationRule] = None,
    limit: int = MAX_RECOMMENDATIONS,
) -> List[Recommendation]:
    """
    Evaluate every rule and return the top recommendations.

    Args:
        ctx: Scores of one country
        rules: Rule table (default: RECOMMENDATION_RULES)
        limit: Maximum number of recommendations

    Returns:
        Recommendations sorted by priority descending
    """
    recommendations: List[Recommendation] = []
    for rule in rules or RECOMMENDATION_RULES:
        recommendations.extend(rule(ctx))

    recommendations.sort(key=lambda r: r.priority, reverse=True)
    return recommendations[:limit]
