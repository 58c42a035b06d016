"""
Platform Profiles and Fixed Coverage Targets

Immutable reference data describing which recruitment taxonomies apply to
each platform and how they are weighted, plus the language set and the
awareness quotas shared by every platform.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .models import TopicKind

logger = logging.getLogger(__name__)


# =============================================================================
# LANGUAGES
# =============================================================================

SUPPORTED_LANGUAGES: Tuple[str, ...] = ("fr", "en", "de", "es", "pt", "ru", "zh", "ar", "hi")

PRIMARY_LANGUAGES: Tuple[str, ...] = ("fr", "en")
SECONDARY_LANGUAGES: Tuple[str, ...] = ("de", "es", "pt")


# =============================================================================
# AWARENESS QUOTAS (per language, independent of topic)
# =============================================================================

@dataclass(frozen=True)
class AwarenessComponent:
    """Per-language quota of one coarse content type."""
    key: str
    content_type: str
    quota: int
    weight: int


AWARENESS_COMPONENTS: Tuple[AwarenessComponent, ...] = (
    AwarenessComponent(key="themes", content_type="pillar", quota=3, weight=40),
    AwarenessComponent(key="comparatives", content_type="comparative", quota=2, weight=30),
    AwarenessComponent(key="landings", content_type="landing", quota=1, weight=30),
)


# =============================================================================
# PLATFORMS
# =============================================================================

PLATFORM_SOS_EXPAT = 1
PLATFORM_ULIXAI = 2


@dataclass(frozen=True)
class RecruitmentComponent:
    """One taxonomy contributing to a platform's recruitment score."""
    key: str
    kind: TopicKind
    weight: int
    count_key: str  # topic count field in the serialized breakdown


@dataclass(frozen=True)
class PlatformProfile:
    """
    Which recruitment sub-dimensions apply to a platform.

    recommendation_component names the component whose under-covered topics
    get individual recommendations (None disables the rule).
    """
    id: int
    key: str
    name: str
    recruitment: Tuple[RecruitmentComponent, ...]
    recommendation_component: Optional[str] = None

    @property
    def total_weight(self) -> int:
        return sum(c.weight for c in self.recruitment)


PLATFORM_PROFILES: Dict[int, PlatformProfile] = {
    PLATFORM_SOS_EXPAT: PlatformProfile(
        id=PLATFORM_SOS_EXPAT,
        key="sos_expat",
        name="SOS-Expat",
        recruitment=(
            RecruitmentComponent("lawyer_specialties", TopicKind.LAWYER_SPECIALTY, 50, "specialties_count"),
            RecruitmentComponent("expat_domains", TopicKind.EXPAT_DOMAIN, 50, "domains_count"),
        ),
        recommendation_component="lawyer_specialties",
    ),
    PLATFORM_ULIXAI: PlatformProfile(
        id=PLATFORM_ULIXAI,
        key="ulixai",
        name="Ulixai",
        recruitment=(
            RecruitmentComponent("ulixai_services", TopicKind.SERVICE, 100, "services_count"),
        ),
    ),
}

# Founder content is counted on every one of these platforms, whichever
# platform the score is requested for.
FOUNDER_PLATFORM_IDS: Tuple[int, ...] = (PLATFORM_SOS_EXPAT, PLATFORM_ULIXAI)


def get_platform_profile(platform_id: int) -> PlatformProfile:
    """
    Get the profile for a platform id.

    Unknown platforms get an empty profile: no recruitment components, so
    their recruitment score is 0 while awareness and founder still apply.
    """
    profile = PLATFORM_PROFILES.get(platform_id)
    if profile is None:
        logger.warning(f"Unknown platform {platform_id}, recruitment will score 0")
        return PlatformProfile(
            id=platform_id,
            key=f"platform_{platform_id}",
            name=f"Platform {platform_id}",
            recruitment=(),
        )
    return profile


def get_founder_profiles() -> Tuple[PlatformProfile, ...]:
    """Profiles of the platforms that each hold one founder slot per language."""
    return tuple(PLATFORM_PROFILES[pid] for pid in FOUNDER_PLATFORM_IDS)
