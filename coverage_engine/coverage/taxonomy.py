"""
Taxonomy Registry

Explicit read-through cache over reference data, scoped to one request or
one batch job. Create one per unit of work and pass it to whatever needs
topics or languages; it is discarded with the unit of work, so there is no
hidden state shared between requests.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .models import CountryRef, LanguageRef, TopicKind, TopicRef
from .platforms import SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)


class TaxonomyRegistry:
    """
    Memoised access to active topics, supported languages and countries.

    `source` is anything exposing list_languages(codes), list_topics(kind) and
    list_countries(order_by_name); normally a CoverageRepository.
    """

    def __init__(self, source, language_codes: Sequence[str] = SUPPORTED_LANGUAGES):
        self._source = source
        self._language_codes = tuple(language_codes)
        self._languages: Optional[List[LanguageRef]] = None
        self._topics: Dict[TopicKind, List[TopicRef]] = {}
        self._countries: Optional[List[CountryRef]] = None

    def languages(self) -> List[LanguageRef]:
        """Supported languages present in the store, in the fixed order."""
        if self._languages is None:
            self._languages = list(self._source.list_languages(self._language_codes))
            missing = set(self._language_codes) - {lang.code for lang in self._languages}
            if missing:
                logger.warning(f"Supported languages missing from store, skipped: {sorted(missing)}")
        return self._languages

    def language_by_code(self, code: str) -> Optional[LanguageRef]:
        for language in self.languages():
            if language.code == code:
                return language
        return None

    def topics(self, kind: TopicKind) -> List[TopicRef]:
        """Active topics of a taxonomy kind."""
        if kind not in self._topics:
            self._topics[kind] = list(self._source.list_topics(kind))
        return self._topics[kind]

    def countries(self) -> List[CountryRef]:
        """Full country reference list, ordered by name."""
        if self._countries is None:
            self._countries = list(self._source.list_countries(order_by_name=True))
        return self._countries
