"""
Completion Oracle

Answers, for a target cell of one country, whether content is published,
unpublished or missing, and how many published items of a content type
exist (awareness quotas).

IndexedCompletionOracle is the production path: one batched fetch per
(platform, country), then dictionary lookups. QueryCompletionOracle issues
one query per cell; it exists to check that both give identical results.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from .founder import FounderMatcher
from .models import CompletionStatus, ContentRecord, Dimension, LanguageRef, TargetCell
from .platforms import FOUNDER_PLATFORM_IDS

logger = logging.getLogger(__name__)


class CompletionOracle(ABC):
    """Existence checks for the target cells of one country."""

    def __init__(self, country_id: int):
        self.country_id = country_id

    @abstractmethod
    def status(self, cell: TargetCell) -> CompletionStatus:
        """Status of a topic (recruitment) or founder cell."""

    @abstractmethod
    def published_count(self, cell: TargetCell) -> int:
        """Published items of the cell's content type in its language."""

    @abstractmethod
    def language_counts(self, platform_id: int, language: LanguageRef) -> Tuple[int, int]:
        """(published, total) articles of the country in one language."""

    @abstractmethod
    def article_counts(self, platform_id: int) -> Tuple[int, int]:
        """(published, total) articles of the country, all languages."""

    def completed_quota(self, cell: TargetCell) -> int:
        """Published items counted toward a quota cell, capped at the quota."""
        return min(self.published_count(cell), cell.quota)


class IndexedCompletionOracle(CompletionOracle):
    """
    In-memory index over the content of one (platform, country) pair.

    Language and article counts are only complete for the platform the
    records were fetched for; other platforms contribute founder content only.
    """

    def __init__(
        self,
        country_id: int,
        records: Iterable[ContentRecord],
        founder_matcher: FounderMatcher = None,
    ):
        super().__init__(country_id)
        self.founder_matcher = founder_matcher or FounderMatcher()

        self._topics: Dict[tuple, CompletionStatus] = {}
        self._founder: Dict[tuple, CompletionStatus] = {}
        self._published_by_type: Dict[tuple, int] = defaultdict(int)
        self._language_counts: Dict[tuple, List[int]] = defaultdict(lambda: [0, 0])
        self._article_counts: Dict[int, List[int]] = defaultdict(lambda: [0, 0])

        count = 0
        for record in records:
            if record.country_id != country_id:
                continue
            self._index(record)
            count += 1
        logger.debug(f"Indexed {count} content records for country {country_id}")

    @classmethod
    def from_repository(
        cls,
        repository,
        platform_id: int,
        country_id: int,
        founder_matcher: FounderMatcher = None,
        founder_platform_ids: Iterable[int] = FOUNDER_PLATFORM_IDS,
    ) -> "IndexedCompletionOracle":
        founder_matcher = founder_matcher or FounderMatcher()
        records = repository.fetch_coverage_content(
            platform_id, country_id, founder_platform_ids, founder_matcher
        )
        return cls(country_id, records, founder_matcher)

    @staticmethod
    def _merge(index: Dict[tuple, CompletionStatus], key: tuple, published: bool) -> None:
        if published:
            index[key] = CompletionStatus.PUBLISHED
        elif index.get(key) is not CompletionStatus.PUBLISHED:
            index[key] = CompletionStatus.UNPUBLISHED

    def _index(self, record: ContentRecord) -> None:
        published = record.is_published
        lang_key = (record.platform_id, record.language_id)

        if record.theme_type and record.theme_id is not None:
            self._merge(
                self._topics,
                (record.platform_id, record.language_id, record.theme_type, record.theme_id),
                published,
            )

        if self.founder_matcher.matches(record):
            self._merge(self._founder, lang_key, published)

        if published and record.type:
            self._published_by_type[(record.platform_id, record.language_id, record.type)] += 1

        self._language_counts[lang_key][1] += 1
        self._article_counts[record.platform_id][1] += 1
        if published:
            self._language_counts[lang_key][0] += 1
            self._article_counts[record.platform_id][0] += 1

    def status(self, cell: TargetCell) -> CompletionStatus:
        if cell.dimension is Dimension.FOUNDER:
            key = (cell.platform_id, cell.language.id)
            return self._founder.get(key, CompletionStatus.MISSING)

        key = (cell.platform_id, cell.language.id, cell.topic.kind.value, cell.topic.id)
        return self._topics.get(key, CompletionStatus.MISSING)

    def published_count(self, cell: TargetCell) -> int:
        return self._published_by_type.get((cell.platform_id, cell.language.id, cell.content_type), 0)

    def language_counts(self, platform_id: int, language: LanguageRef) -> Tuple[int, int]:
        counts = self._language_counts.get((platform_id, language.id), [0, 0])
        return counts[0], counts[1]

    def article_counts(self, platform_id: int) -> Tuple[int, int]:
        counts = self._article_counts.get(platform_id, [0, 0])
        return counts[0], counts[1]


class QueryCompletionOracle(CompletionOracle):
    """One data-store query per cell (O(topics × languages) round trips)."""

    def __init__(self, repository, country_id: int, founder_matcher: FounderMatcher = None):
        super().__init__(country_id)
        self.repository = repository
        self.founder_matcher = founder_matcher or FounderMatcher()

    def status(self, cell: TargetCell) -> CompletionStatus:
        if cell.dimension is Dimension.FOUNDER:
            return self.repository.founder_status(
                cell.platform_id, self.country_id, cell.language.id, self.founder_matcher
            )
        return self.repository.topic_status(
            cell.platform_id,
            self.country_id,
            cell.language.id,
            cell.topic.kind.value,
            cell.topic.id,
        )

    def published_count(self, cell: TargetCell) -> int:
        return self.repository.count_published_of_type(
            cell.platform_id, self.country_id, cell.language.id, cell.content_type
        )

    def language_counts(self, platform_id: int, language: LanguageRef) -> Tuple[int, int]:
        return self.repository.language_counts(platform_id, self.country_id, language.id)

    def article_counts(self, platform_id: int) -> Tuple[int, int]:
        return self.repository.article_counts(platform_id, self.country_id)
