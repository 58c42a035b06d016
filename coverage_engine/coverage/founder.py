"""
Founder Content Matching

Founder coverage is cross-platform: one slot per founder platform and
language. A content item fills a slot when it is explicitly classified as
founder content (theme_type or type "founder").

Legacy content written before the classification existed can be tagged once
with the backfill script (scripts/backfill_founder_tags.py). The title match
used by that backfill can also be enabled at scoring time with
FOUNDER_TITLE_FALLBACK, but it is off by default.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .models import ContentRecord

FOUNDER_CLASSIFICATION = "founder"

DEFAULT_FOUNDER_KEYWORDS: Tuple[str, ...] = ("Williams Jullin", "fondateur", "founder")


def title_mentions_founder(title: Optional[str], keywords: Iterable[str]) -> bool:
    """Case-insensitive substring match of any keyword in a title."""
    if not title:
        return False
    lowered = title.lower()
    return any(keyword.lower() in lowered for keyword in keywords if keyword)


@dataclass(frozen=True)
class FounderMatcher:
    """Decides whether a content item counts toward the founder dimension."""
    title_fallback: bool = False
    keywords: Tuple[str, ...] = DEFAULT_FOUNDER_KEYWORDS

    @classmethod
    def from_settings(cls, settings) -> "FounderMatcher":
        return cls(
            title_fallback=settings.FOUNDER_TITLE_FALLBACK,
            keywords=tuple(settings.FOUNDER_TITLE_KEYWORDS),
        )

    def is_classified(self, record: ContentRecord) -> bool:
        return FOUNDER_CLASSIFICATION in (record.theme_type, record.type)

    def matches(self, record: ContentRecord) -> bool:
        if self.is_classified(record):
            return True
        return self.title_fallback and title_mentions_founder(record.title, self.keywords)
