"""
Coverage Domain Types

Plain, immutable records passed between the taxonomy registry, the target
matrix builder, the completion oracle and the scorers. None of them carries a
database session, so scoring can run on fixtures without SQLAlchemy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CompletionStatus(Enum):
    """Outcome of an existence check for one target cell."""
    PUBLISHED = "published"      # Satisfies the target
    UNPUBLISHED = "unpublished"  # Exists, not yet live
    MISSING = "missing"          # Nothing to show

    @property
    def completed(self) -> bool:
        return self is CompletionStatus.PUBLISHED


class TopicKind(Enum):
    """Taxonomies that generate recruitment targets."""
    LAWYER_SPECIALTY = "lawyer_specialty"
    EXPAT_DOMAIN = "expat_domain"
    SERVICE = "ulixai_service"


class Dimension(Enum):
    """Independently weighted axes of content completeness."""
    RECRUITMENT = "recruitment"
    AWARENESS = "awareness"
    FOUNDER = "founder"


@dataclass(frozen=True)
class LanguageRef:
    """A supported language resolved against the content store."""
    id: int
    code: str
    name: str


@dataclass(frozen=True)
class CountryRef:
    """Country reference data."""
    id: int
    code: str
    name: str
    region: str = ""


@dataclass(frozen=True)
class TopicRef:
    """An active topic of one taxonomy kind."""
    id: int
    code: str
    name: str
    kind: TopicKind
    category: Optional[str] = None
    parent_name: Optional[str] = None


@dataclass(frozen=True)
class ContentRecord:
    """The slice of an article the completion oracle needs."""
    platform_id: int
    country_id: int
    language_id: int
    type: Optional[str]
    theme_type: Optional[str]
    theme_id: Optional[int]
    status: str
    title: str = ""

    @property
    def is_published(self) -> bool:
        return self.status == "published"


@dataclass(frozen=True)
class TargetCell:
    """
    One required (topic-or-content-type × language) combination.

    Recruitment cells carry a topic, awareness cells a content type and a
    quota, founder cells the platform slot they belong to.
    """
    dimension: Dimension
    component: str
    platform_id: int
    language: LanguageRef
    topic: Optional[TopicRef] = None
    content_type: Optional[str] = None
    quota: int = 1

    @property
    def key(self) -> tuple:
        subject = self.topic.id if self.topic else self.content_type
        return (
            self.dimension.value,
            self.component,
            self.platform_id,
            self.language.code,
            subject,
        )
