"""
Coverage Model

Reference data, target enumeration and completion checks:

- platforms: fixed languages, awareness quotas and platform profiles
- taxonomy: per-request registry of topics, languages and countries
- targets: the target matrix of one platform
- oracle: published / unpublished / missing answers for target cells
- founder: founder content classification
"""

from .models import (
    CompletionStatus,
    ContentRecord,
    CountryRef,
    Dimension,
    LanguageRef,
    TargetCell,
    TopicKind,
    TopicRef,
)
from .platforms import (
    AWARENESS_COMPONENTS,
    FOUNDER_PLATFORM_IDS,
    PLATFORM_PROFILES,
    PLATFORM_SOS_EXPAT,
    PLATFORM_ULIXAI,
    PRIMARY_LANGUAGES,
    SECONDARY_LANGUAGES,
    SUPPORTED_LANGUAGES,
    AwarenessComponent,
    PlatformProfile,
    RecruitmentComponent,
    get_founder_profiles,
    get_platform_profile,
)
from .founder import (
    DEFAULT_FOUNDER_KEYWORDS,
    FOUNDER_CLASSIFICATION,
    FounderMatcher,
    title_mentions_founder,
)
from .taxonomy import TaxonomyRegistry
from .targets import TargetMatrix, build_target_matrix
from .oracle import CompletionOracle, IndexedCompletionOracle, QueryCompletionOracle

__all__ = [
    "CompletionStatus",
    "ContentRecord",
    "CountryRef",
    "Dimension",
    "LanguageRef",
    "TargetCell",
    "TopicKind",
    "TopicRef",
    "AWARENESS_COMPONENTS",
    "FOUNDER_PLATFORM_IDS",
    "PLATFORM_PROFILES",
    "PLATFORM_SOS_EXPAT",
    "PLATFORM_ULIXAI",
    "PRIMARY_LANGUAGES",
    "SECONDARY_LANGUAGES",
    "SUPPORTED_LANGUAGES",
    "AwarenessComponent",
    "PlatformProfile",
    "RecruitmentComponent",
    "get_founder_profiles",
    "get_platform_profile",
    "DEFAULT_FOUNDER_KEYWORDS",
    "FOUNDER_CLASSIFICATION",
    "FounderMatcher",
    "title_mentions_founder",
    "TaxonomyRegistry",
    "TargetMatrix",
    "build_target_matrix",
    "CompletionOracle",
    "IndexedCompletionOracle",
    "QueryCompletionOracle",
]
