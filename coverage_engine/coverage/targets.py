"""
Target Matrix Builder

Enumerates the required cells of every dimension for one platform:

- Recruitment: active topics × languages, per platform recruitment component
- Awareness: one quota cell per (content type, language)
- Founder: one cell per (founder platform, language)

Cells are unique per (dimension, component, platform, language, subject);
adding a duplicate is a no-op, so nothing is counted twice.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from .models import Dimension, TargetCell
from .platforms import (
    AWARENESS_COMPONENTS,
    AwarenessComponent,
    PlatformProfile,
    get_founder_profiles,
)

logger = logging.getLogger(__name__)


class TargetMatrix:
    """Ordered, de-duplicated set of target cells."""

    def __init__(self, platform_id: int):
        self.platform_id = platform_id
        self._cells: Dict[tuple, TargetCell] = {}

    def add(self, cell: TargetCell) -> bool:
        """Add a cell. Returns False if an identical cell was already present."""
        if cell.key in self._cells:
            return False
        self._cells[cell.key] = cell
        return True

    def cells(
        self,
        dimension: Optional[Dimension] = None,
        component: Optional[str] = None,
    ) -> List[TargetCell]:
        return [
            cell for cell in self._cells.values()
            if (dimension is None or cell.dimension is dimension)
            and (component is None or cell.component == component)
        ]

    def total_targets(
        self,
        dimension: Optional[Dimension] = None,
        component: Optional[str] = None,
    ) -> int:
        """Number of targets, counting a quota cell as `quota` targets."""
        return sum(cell.quota for cell in self.cells(dimension, component))

    def __len__(self) -> int:
        return len(self._cells)


def add_recruitment_targets(matrix: TargetMatrix, profile: PlatformProfile, taxonomy) -> None:
    languages = taxonomy.languages()
    for component in profile.recruitment:
        for topic in taxonomy.topics(component.kind):
            for language in languages:
                matrix.add(TargetCell(
                    dimension=Dimension.RECRUITMENT,
                    component=component.key,
                    platform_id=profile.id,
                    language=language,
                    topic=topic,
                ))


def add_awareness_targets(
    matrix: TargetMatrix,
    platform_id: int,
    taxonomy,
    components: Sequence[AwarenessComponent] = AWARENESS_COMPONENTS,
) -> None:
    languages = taxonomy.languages()
    for component in components:
        for language in languages:
            matrix.add(TargetCell(
                dimension=Dimension.AWARENESS,
                component=component.key,
                platform_id=platform_id,
                language=language,
                content_type=component.content_type,
                quota=component.quota,
            ))


def add_founder_targets(
    matrix: TargetMatrix,
    taxonomy,
    founder_profiles: Iterable[PlatformProfile] = None,
) -> None:
    founder_profiles = tuple(founder_profiles or get_founder_profiles())
    for language in taxonomy.languages():
        for founder_platform in founder_profiles:
            matrix.add(TargetCell(
                dimension=Dimension.FOUNDER,
                component=founder_platform.key,
                platform_id=founder_platform.id,
                language=language,
                content_type="founder",
            ))


def build_target_matrix(
    profile: PlatformProfile,
    taxonomy,
    founder_profiles: Iterable[PlatformProfile] = None,
) -> TargetMatrix:
    """
    Build the full target matrix for a platform.

    Args:
        profile: Platform whose recruitment components apply
        taxonomy: TaxonomyRegistry (or anything with languages()/topics(kind))
        founder_profiles: Platforms holding a founder slot (default: all founder platforms)

    Returns:
        TargetMatrix with recruitment, awareness and founder cells
    """
    matrix = TargetMatrix(profile.id)
    add_recruitment_targets(matrix, profile, taxonomy)
    add_awareness_targets(matrix, profile.id, taxonomy)
    add_founder_targets(matrix, taxonomy, founder_profiles)
    logger.debug(f"Built target matrix for platform {profile.id}: {len(matrix)} cells")
    return matrix
