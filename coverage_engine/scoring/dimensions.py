"""
Dimension Scorers

Turns a target matrix plus a completion oracle into the three dimension
scores of one country:

1. Recruitment - topics × languages per platform component, weighted
   by the platform profile (SOS-Expat: 50/50, Ulixai: 100)
2. Awareness - per-language quotas of pillar (3), comparative (2) and
   landing (1) content, weighted 40/30/30
3. Founder - one slot per founder platform and language

Formula (each component):
    Component_Score = completed_targets / total_targets × 100

Dimension scores are the weighted average of their component scores.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from coverage_engine.coverage.models import (
    CompletionStatus, Dimension, LanguageRef, TopicRef,
)
from coverage_engine.coverage.platforms import (
    AWARENESS_COMPONENTS,
    AwarenessComponent,
    PlatformProfile,
)

from .helpers import (
    calculate_language_score,
    calculate_weighted_average,
    capped_percentage,
    get_status_from_score,
    round_score,
    safe_percentage,
)

logger = logging.getLogger(__name__)


# ============================================================================
# BREAKDOWN RECORDS
# ============================================================================

@dataclass
class TopicCoverage:
    """Per-language completion of one recruitment topic."""
    topic: TopicRef
    languages: Dict[str, CompletionStatus] = field(default_factory=OrderedDict)

    @property
    def completed_count(self) -> int:
        return sum(1 for status in self.languages.values() if status.completed)

    @property
    def progress(self) -> float:
        return safe_percentage(self.completed_count, len(self.languages))

    @property
    def missing_languages(self) -> List[str]:
        return [code for code, status in self.languages.items() if not status.completed]

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.topic.id,
            "code": self.topic.code,
            "name": self.topic.name,
        }
        if self.topic.category is not None:
            data["category"] = self.topic.category
        if self.topic.parent_name is not None:
            data["parent_name"] = self.topic.parent_name
        data.update({
            "languages": {
                code: {"completed": status.completed, "status": status.value}
                for code, status in self.languages.items()
            },
            "completed_count": self.completed_count,
            "progress": round_score(self.progress),
        })
        return data


@dataclass
class QuotaProgress:
    """Awareness progress of one content type in one language."""
    target: int
    completed: int
    total: int

    @property
    def progress(self) -> float:
        return safe_percentage(self.completed, self.target)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "completed": self.completed,
            "total": self.total,
            "progress": round_score(self.progress),
        }


@dataclass
class FounderLanguageCoverage:
    """Founder slots of one language, keyed by founder platform."""
    slots: Dict[str, CompletionStatus] = field(default_factory=OrderedDict)

    @property
    def completed_count(self) -> int:
        return sum(1 for status in self.slots.values() if status.completed)

    @property
    def is_complete(self) -> bool:
        return bool(self.slots) and self.completed_count == len(self.slots)

    @property
    def combined_progress(self) -> float:
        return safe_percentage(self.completed_count, len(self.slots))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            key: {"completed": status.completed, "status": status.value}
            for key, status in self.slots.items()
        }
        data["combined_progress"] = round_score(self.combined_progress)
        return data


@dataclass
class ComponentScore:
    """Score of one sub-dimension (a recruitment taxonomy or awareness type)."""
    key: str
    weight: int
    score: float
    total_targets: int
    completed_targets: int
    details: Any = None  # List[TopicCoverage] or Dict[str, QuotaProgress]
    count_key: Optional[str] = None

    @property
    def missing_targets(self) -> int:
        return self.total_targets - self.completed_targets

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "score": round_score(self.score),
            "weight": self.weight,
            "articles_count": self.completed_targets,
            "total_targets": self.total_targets,
            "completed_targets": self.completed_targets,
            "missing_targets": self.missing_targets,
        }
        if isinstance(self.details, list):
            if self.count_key:
                data[self.count_key] = len(self.details)
            data["details"] = [item.to_dict() for item in self.details]
        elif isinstance(self.details, dict):
            data["details"] = {code: item.to_dict() for code, item in self.details.items()}
        return data


@dataclass
class DimensionScore:
    """Score of one dimension with its breakdown."""
    dimension: Dimension
    score: float
    total_targets: int
    completed_targets: int
    components: Dict[str, ComponentScore] = field(default_factory=OrderedDict)
    languages: Dict[str, FounderLanguageCoverage] = field(default_factory=OrderedDict)

    @property
    def missing_targets(self) -> int:
        return self.total_targets - self.completed_targets

    def breakdown(self) -> Dict[str, Any]:
        """Component breakdown, or per-language slots for the founder dimension."""
        if self.dimension is Dimension.FOUNDER:
            return {code: item.to_dict() for code, item in self.languages.items()}
        return {key: component.to_dict() for key, component in self.components.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": round_score(self.score),
            "articles_count": self.completed_targets,
            "total_targets": self.total_targets,
            "completed_targets": self.completed_targets,
            "missing_targets": self.missing_targets,
            "breakdown": self.breakdown(),
        }


@dataclass
class LanguageScore:
    """Published-volume score of one language in one country."""
    language: LanguageRef
    total_articles: int
    published_articles: int
    score: float

    @property
    def unpublished_articles(self) -> int:
        return self.total_articles - self.published_articles

    @property
    def status(self) -> str:
        return get_status_from_score(self.score).value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language_id": self.language.id,
            "language_code": self.language.code,
            "language_name": self.language.name,
            "total_articles": self.total_articles,
            "published_articles": self.published_articles,
            "unpublished_articles": self.unpublished_articles,
            "score": round_score(self.score),
            "status": self.status,
        }


def empty_dimension(dimension: Dimension) -> DimensionScore:
    return DimensionScore(dimension=dimension, score=0.0, total_targets=0, completed_targets=0)


def _weighted(components: Sequence[ComponentScore]) -> float:
    return calculate_weighted_average(
        [{"score": c.score, "weight": c.weight} for c in components],
        value_key="score",
        weight_key="weight",
    )


# ============================================================================
# SCORERS
# ============================================================================

def score_recruitment(matrix, oracle, profile: PlatformProfile) -> DimensionScore:
    """
    Score recruitment coverage: published content per topic and language.

    Args:
        matrix: TargetMatrix built for the profile's platform
        oracle: CompletionOracle of the country
        profile: Platform profile naming the recruitment components

    Returns:
        DimensionScore with one ComponentScore per recruitment component
    """
    components: Dict[str, ComponentScore] = OrderedDict()

    for component in profile.recruitment:
        topics: Dict[int, TopicCoverage] = OrderedDict()
        for cell in matrix.cells(Dimension.RECRUITMENT, component.key):
            coverage = topics.setdefault(cell.topic.id, TopicCoverage(topic=cell.topic))
            coverage.languages[cell.language.code] = oracle.status(cell)

        total = sum(len(t.languages) for t in topics.values())
        completed = sum(t.completed_count for t in topics.values())
        components[component.key] = ComponentScore(
            key=component.key,
            weight=component.weight,
            score=safe_percentage(completed, total),
            total_targets=total,
            completed_targets=completed,
            details=list(topics.values()),
            count_key=component.count_key,
        )

    if not components:
        logger.debug(f"Platform {profile.id} has no recruitment components")

    return DimensionScore(
        dimension=Dimension.RECRUITMENT,
        score=_weighted(list(components.values())),
        total_targets=sum(c.total_targets for c in components.values()),
        completed_targets=sum(c.completed_targets for c in components.values()),
        components=components,
    )


def score_awareness(
    matrix,
    oracle,
    awareness_components: Sequence[AwarenessComponent] = AWARENESS_COMPONENTS,
) -> DimensionScore:
    """
    Score awareness coverage: per-language quotas of coarse content types.

    Published items beyond a quota do not count, so no language can make up
    for another.
    """
    components: Dict[str, ComponentScore] = OrderedDict()

    for component in awareness_components:
        details: Dict[str, QuotaProgress] = OrderedDict()
        for cell in matrix.cells(Dimension.AWARENESS, component.key):
            count = oracle.published_count(cell)
            details[cell.language.code] = QuotaProgress(
                target=cell.quota,
                completed=min(count, cell.quota),
                total=count,
            )

        total = sum(item.target for item in details.values())
        completed = sum(item.completed for item in details.values())
        components[component.key] = ComponentScore(
            key=component.key,
            weight=component.weight,
            score=capped_percentage(completed, total),
            total_targets=total,
            completed_targets=completed,
            details=details,
        )

    return DimensionScore(
        dimension=Dimension.AWARENESS,
        score=_weighted(list(components.values())),
        total_targets=sum(c.total_targets for c in components.values()),
        completed_targets=sum(c.completed_targets for c in components.values()),
        components=components,
    )


def score_founder(matrix, oracle) -> DimensionScore:
    """Score founder coverage across every founder platform slot."""
    languages: Dict[str, FounderLanguageCoverage] = OrderedDict()

    for cell in matrix.cells(Dimension.FOUNDER):
        coverage = languages.setdefault(cell.language.code, FounderLanguageCoverage())
        coverage.slots[cell.component] = oracle.status(cell)

    total = sum(len(item.slots) for item in languages.values())
    completed = sum(item.completed_count for item in languages.values())

    return DimensionScore(
        dimension=Dimension.FOUNDER,
        score=safe_percentage(completed, total),
        total_targets=total,
        completed_targets=completed,
        languages=languages,
    )


def score_languages(
    oracle,
    platform_id: int,
    languages: Sequence[LanguageRef],
    target: int,
) -> Dict[str, LanguageScore]:
    """
    Per-language published-volume scores.

    Args:
        oracle: CompletionOracle of the country
        platform_id: Platform whose content is counted
        languages: Resolved supported languages
        target: Published articles that count as 100%
    """
    scores: Dict[str, LanguageScore] = OrderedDict()
    for language in languages:
        published, total = oracle.language_counts(platform_id, language)
        scores[language.code] = LanguageScore(
            language=language,
            total_articles=total,
            published_articles=published,
            score=calculate_language_score(published, target),
        )
    return scores


def get_language_score(scores: Dict[str, LanguageScore], code: str) -> float:
    """Score of one language; 0 when the language is not in the store."""
    language_score: Optional[LanguageScore] = scores.get(code)
    return language_score.score if language_score else 0.0
