"""
Coverage Analysis Service

Orchestrates coverage scoring for the HTTP layer and batch jobs:
1. Country scores (cached, 5 minute TTL)
2. Global coverage summary per platform (cached)
3. Country lists, language statistics, recommendations
4. Founder coverage, language matrix, generation plans
5. Cache invalidation

One service instance serves one unit of work (a request or a batch job):
its TaxonomyRegistry memoises reference data for that lifetime only.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coverage_engine.cache import (
    CacheEvent,
    CoverageCacheInvalidator,
    InvalidationResult,
    ScoreCache,
    get_score_cache,
)
from coverage_engine.coverage import (
    PLATFORM_PROFILES,
    SUPPORTED_LANGUAGES,
    FounderMatcher,
    IndexedCompletionOracle,
    QueryCompletionOracle,
    TaxonomyRegistry,
    TopicKind,
    get_platform_profile,
)
from coverage_engine.database.repository import CoverageRepository
from coverage_engine.scoring import (
    GENERATION_CONTENT_TYPES,
    build_language_stats,
    build_matrix_rows,
    collect_global_recommendations,
    filter_and_sort_countries,
    plan_generation_tasks,
    score_country,
    summarize_founder_coverage,
    summarize_global_coverage,
    to_list_entry,
)
from coverage_engine.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

DIMENSIONS = ("recruitment", "awareness", "founder")

TOPIC_GROUPS = {
    TopicKind.LAWYER_SPECIALTY: "lawyer_specialties",
    TopicKind.EXPAT_DOMAIN: "expat_domains",
    TopicKind.SERVICE: "ulixai_services",
}


class CoverageService:
    """Service for coverage scoring operations."""

    def __init__(
        self,
        db: Session,
        cache: Optional[ScoreCache] = None,
        settings: Optional[Settings] = None,
        indexed: bool = True,
    ):
        """
        Initialize coverage service.

        Args:
            db: Database session
            cache: Score cache (default: process-wide singleton)
            settings: Application settings (default: get_settings())
            indexed: Use the batched IndexedCompletionOracle (False issues
                one query per target cell)
        """
        self.db = db
        self.settings = settings or get_settings()
        self.cache = cache or get_score_cache()
        self.repository = CoverageRepository(db)
        self.taxonomy = TaxonomyRegistry(self.repository)
        self.founder_matcher = FounderMatcher.from_settings(self.settings)
        self.indexed = indexed
        self.invalidator = CoverageCacheInvalidator(
            self.cache,
            list_country_ids=lambda: [c.id for c in self.repository.list_countries()],
            platform_ids=sorted(PLATFORM_PROFILES),
        )

    # =========================================================================
    # Country scores
    # =========================================================================

    def _build_oracle(self, platform_id: int, country_id: int):
        if self.indexed:
            return IndexedCompletionOracle.from_repository(
                self.repository, platform_id, country_id, self.founder_matcher
            )
        return QueryCompletionOracle(self.repository, country_id, self.founder_matcher)

    def compute_country_score(self, platform_id: int, country_id: int) -> Dict[str, Any]:
        """Score one country without touching the cache."""
        profile = get_platform_profile(platform_id)
        try:
            country = self.repository.get_country(country_id)
            oracle = self._build_oracle(profile.id, country_id) if country else None
            coverage = score_country(
                country,
                profile,
                self.taxonomy,
                oracle,
                country_id=country_id,
                language_target=self.settings.LANGUAGE_ARTICLE_TARGET,
                founder_name=self.settings.FOUNDER_NAME,
            )
        except SQLAlchemyError as e:
            logger.error(f"Coverage query failed for platform {platform_id}, country {country_id}: {e}")
            raise
        return coverage.to_dict()

    def get_country_score(self, platform_id: int, country_id: int) -> Dict[str, Any]:
        """
        Get the coverage result of one country (cached).

        Unknown countries give a zero-valued result with status "missing".
        """
        return self.cache.get_or_compute(
            self.cache.country_key(platform_id, country_id),
            self.cache.config.ttl.COUNTRY_SCORE,
            lambda: self.compute_country_score(platform_id, country_id),
        )

    def get_country_details(self, platform_id: int, country_id: int) -> Dict[str, Any]:
        """Country result plus its 50 most recent articles."""
        details = dict(self.get_country_score(platform_id, country_id))
        details["recent_articles"] = self.repository.recent_articles(platform_id, country_id)
        return details

    def get_dimension_view(self, platform_id: int, country_id: int, dimension: str) -> Dict[str, Any]:
        """
        One dimension of a country result.

        Raises:
            ValueError: Unknown dimension
        """
        if dimension not in DIMENSIONS:
            raise ValueError(f"Unknown dimension: {dimension}")

        score = self.get_country_score(platform_id, country_id)
        view = {
            "country_id": country_id,
            f"{dimension}_score": score[f"{dimension}_score"],
            "breakdown": score[f"{dimension}_breakdown"],
        }
        if dimension == "founder":
            view["founder_name"] = self.settings.FOUNDER_NAME
        return view

    def _all_country_scores(self, platform_id: int) -> List[Dict[str, Any]]:
        return [self.get_country_score(platform_id, c.id) for c in self.taxonomy.countries()]

    # =========================================================================
    # Global views
    # =========================================================================

    def get_global_coverage(self, platform_id: int) -> Dict[str, Any]:
        """Coverage summary of every country on a platform (cached)."""
        def compute():
            logger.info(f"Computing global coverage for platform {platform_id}")
            return summarize_global_coverage(platform_id, self._all_country_scores(platform_id))

        return self.cache.get_or_compute(
            self.cache.global_key(platform_id),
            self.cache.config.ttl.GLOBAL_COVERAGE,
            compute,
        )

    def list_countries_with_scores(
        self,
        platform_id: int,
        region: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "priority_score",
        sort_order: str = "desc",
    ) -> List[Dict[str, Any]]:
        """
        Country list entries, filtered and sorted.

        Raises:
            ValueError: Unknown sort field or order
        """
        entries = [to_list_entry(score) for score in self._all_country_scores(platform_id)]
        return filter_and_sort_countries(
            entries,
            region=region,
            status=status,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    def get_language_stats(self, platform_id: int) -> Dict[str, Dict[str, Any]]:
        """Per-language article totals and country coverage of a platform."""
        try:
            totals = self.repository.language_totals(platform_id)
            country_count = self.repository.count_countries()
        except SQLAlchemyError as e:
            logger.error(f"Language statistics query failed for platform {platform_id}: {e}")
            raise
        return build_language_stats(self.taxonomy.languages(), totals, country_count)

    def get_global_recommendations(self, platform_id: int, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Recommendations of the highest-priority countries, annotated with the
        country and sorted by priority.
        """
        pool = self.settings.GLOBAL_RECOMMENDATION_COUNTRY_POOL
        entries = self.list_countries_with_scores(platform_id)[:pool]
        scores = [self.get_country_score(platform_id, entry["id"]) for entry in entries]
        return collect_global_recommendations(scores, limit)

    def get_founder_coverage_global(self) -> Dict[str, Any]:
        """Founder coverage of every country (platform independent)."""
        rows = []
        for score in self._all_country_scores(self.settings.DEFAULT_PLATFORM_ID):
            slots = [
                slot
                for language in score["founder_breakdown"].values()
                for key, slot in language.items()
                if key != "combined_progress"
            ]
            rows.append({
                "country_id": score["country_id"],
                "country_name": score["country_name"],
                "country_code": score["country_code"],
                "region": score["region"],
                "score": score["founder_score"],
                "completed_targets": sum(1 for slot in slots if slot["completed"]),
                "total_targets": len(slots),
                "breakdown": score["founder_breakdown"],
            })
        return summarize_founder_coverage(rows, self.settings.FOUNDER_NAME)

    def get_coverage_matrix(
        self,
        platform_id: int,
        region: Optional[str] = None,
        limit: int = 50,
    ) -> Dict[str, Any]:
        """Countries × languages grid of language scores, highest priority first."""
        entries = self.list_countries_with_scores(platform_id, region=region)[:limit]
        scores = [self.get_country_score(platform_id, entry["id"]) for entry in entries]
        columns = [language.code for language in self.taxonomy.languages()]
        return {
            "type": "language",
            "columns": columns,
            "rows": build_matrix_rows(scores, columns),
        }

    def list_topics(self, kind: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        """
        Active topics grouped by taxonomy (leaf services only).

        Raises:
            ValueError: Unknown topic kind
        """
        if kind:
            try:
                kinds = [TopicKind(kind)]
            except ValueError:
                raise ValueError(f"Unknown topic type: {kind}") from None
        else:
            kinds = list(TOPIC_GROUPS)

        data = {}
        for topic_kind in kinds:
            data[TOPIC_GROUPS[topic_kind]] = [
                {
                    "id": topic.id,
                    "code": topic.code,
                    "name": topic.name,
                    "category": topic.category,
                    "parent_name": topic.parent_name,
                }
                for topic in self.taxonomy.topics(topic_kind)
            ]
        return data

    def build_generation_plan(
        self,
        platform_id: int,
        country_ids: Sequence[int],
        languages: Sequence[str],
        content_types: Sequence[str],
    ) -> Dict[str, Any]:
        """
        Production plan for the gaps of the given countries.

        Unknown country ids are skipped.

        Raises:
            ValueError: Unknown platform, unsupported language or content type
        """
        if platform_id not in PLATFORM_PROFILES:
            raise ValueError(f"Unknown platform: {platform_id}")
        unsupported = [code for code in languages if code not in SUPPORTED_LANGUAGES]
        if unsupported:
            raise ValueError(f"Unsupported languages: {unsupported}")
        unknown_types = [t for t in content_types if t not in GENERATION_CONTENT_TYPES]
        if unknown_types:
            raise ValueError(f"Unsupported content types: {unknown_types}")

        scores = []
        for country_id in country_ids:
            if self.repository.get_country(country_id) is None:
                logger.warning(f"Generation plan: country {country_id} not found, skipped")
                continue
            scores.append(self.get_country_score(platform_id, country_id))

        return plan_generation_tasks(scores, languages, content_types, self.settings.FOUNDER_NAME)

    # =========================================================================
    # Cache
    # =========================================================================

    def invalidate_cache(self, platform_id: int, country_id: Optional[int] = None) -> int:
        """Drop the country entry (when given) and the platform's global entry."""
        return self.invalidator.invalidate(platform_id, country_id)

    def invalidate_all_cache(self) -> int:
        """Drop every cached coverage result."""
        return self.invalidator.invalidate_all()

    def handle_content_event(
        self,
        event: CacheEvent,
        platform_id: Optional[int] = None,
        country_id: Optional[int] = None,
        is_founder: bool = False,
    ) -> InvalidationResult:
        """Invalidate what a content or taxonomy change makes stale."""
        return self.invalidator.handle_event(event, platform_id, country_id, is_founder)
