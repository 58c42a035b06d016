"""
Tests for the completion oracle.

These tests verify:
- Published content satisfies a cell, unpublished content does not
- Founder classification and the optional title fallback
- Awareness quota capping
- The batched (indexed) oracle and the per-cell (query) oracle agree
"""

import pytest

from coverage_engine.coverage import (
    CompletionStatus,
    ContentRecord,
    Dimension,
    FounderMatcher,
    IndexedCompletionOracle,
    LanguageRef,
    QueryCompletionOracle,
    TargetCell,
    TopicKind,
    TopicRef,
)
from coverage_engine.database import CoverageRepository, ThemeType
from coverage_engine.services import CoverageService

from conftest import (
    BOLIVIA, DOMAIN_HOUSING, FRANCE, SERVICE_VISA, SOS_EXPAT,
    SPECIALTY_IMMIGRATION, SPECIALTY_TAX, ULIXAI,
)


FR = LanguageRef(id=1, code="fr", name="Français")
EN = LanguageRef(id=2, code="en", name="English")
IMMIGRATION = TopicRef(id=1, code="immigration", name="Immigration", kind=TopicKind.LAWYER_SPECIALTY)


def record(**overrides) -> ContentRecord:
    values = dict(
        platform_id=SOS_EXPAT,
        country_id=FRANCE,
        language_id=FR.id,
        type="article",
        theme_type=None,
        theme_id=None,
        status="published",
        title="Guide",
    )
    values.update(overrides)
    return ContentRecord(**values)


def topic_cell(language=FR, topic=IMMIGRATION) -> TargetCell:
    return TargetCell(
        dimension=Dimension.RECRUITMENT,
        component="lawyer_specialties",
        platform_id=SOS_EXPAT,
        language=language,
        topic=topic,
    )


def founder_cell(platform_id=ULIXAI, language=FR) -> TargetCell:
    return TargetCell(
        dimension=Dimension.FOUNDER,
        component="ulixai" if platform_id == ULIXAI else "sos_expat",
        platform_id=platform_id,
        language=language,
        content_type="founder",
    )


def pillar_cell(language=FR) -> TargetCell:
    return TargetCell(
        dimension=Dimension.AWARENESS,
        component="themes",
        platform_id=SOS_EXPAT,
        language=language,
        content_type="pillar",
        quota=3,
    )


# =============================================================================
# INDEXED ORACLE
# =============================================================================

@pytest.mark.unit
class TestIndexedCompletionOracle:
    """Test status lookups over in-memory records."""

    def test_missing_when_no_content(self):
        oracle = IndexedCompletionOracle(FRANCE, [])

        assert oracle.status(topic_cell()) is CompletionStatus.MISSING

    def test_published_topic_completes_cell(self):
        oracle = IndexedCompletionOracle(FRANCE, [
            record(theme_type="lawyer_specialty", theme_id=IMMIGRATION.id),
        ])

        assert oracle.status(topic_cell()) is CompletionStatus.PUBLISHED
        assert oracle.status(topic_cell(language=EN)) is CompletionStatus.MISSING

    def test_draft_is_unpublished_not_completed(self):
        oracle = IndexedCompletionOracle(FRANCE, [
            record(theme_type="lawyer_specialty", theme_id=IMMIGRATION.id, status="draft"),
        ])

        status = oracle.status(topic_cell())
        assert status is CompletionStatus.UNPUBLISHED
        assert status.completed is False

    def test_published_wins_over_draft_in_any_order(self):
        draft = record(theme_type="lawyer_specialty", theme_id=IMMIGRATION.id, status="draft")
        published = record(theme_type="lawyer_specialty", theme_id=IMMIGRATION.id)

        assert IndexedCompletionOracle(FRANCE, [published, draft]).status(topic_cell()).completed
        assert IndexedCompletionOracle(FRANCE, [draft, published]).status(topic_cell()).completed

    def test_other_country_ignored(self):
        oracle = IndexedCompletionOracle(FRANCE, [
            record(country_id=BOLIVIA, theme_type="lawyer_specialty", theme_id=IMMIGRATION.id),
        ])

        assert oracle.status(topic_cell()) is CompletionStatus.MISSING
        assert oracle.article_counts(SOS_EXPAT) == (0, 0)

    def test_quota_counts_are_capped(self):
        oracle = IndexedCompletionOracle(FRANCE, [record(type="pillar") for _ in range(5)])

        assert oracle.published_count(pillar_cell()) == 5
        assert oracle.completed_quota(pillar_cell()) == 3

    def test_founder_theme_type_fills_slot(self):
        oracle = IndexedCompletionOracle(FRANCE, [
            record(platform_id=ULIXAI, theme_type="founder"),
        ])

        assert oracle.status(founder_cell(ULIXAI)).completed
        assert oracle.status(founder_cell(SOS_EXPAT)) is CompletionStatus.MISSING

    def test_founder_type_fills_slot(self):
        oracle = IndexedCompletionOracle(FRANCE, [record(type="founder")])

        assert oracle.status(founder_cell(SOS_EXPAT)).completed

    def test_title_mention_ignored_by_default(self):
        oracle = IndexedCompletionOracle(FRANCE, [
            record(title="Rencontre avec Williams Jullin"),
        ])

        assert oracle.status(founder_cell(SOS_EXPAT)) is CompletionStatus.MISSING

    def test_title_fallback_when_enabled(self):
        matcher = FounderMatcher(title_fallback=True, keywords=("Williams Jullin",))
        oracle = IndexedCompletionOracle(FRANCE, [
            record(title="Rencontre avec WILLIAMS JULLIN"),
        ], founder_matcher=matcher)

        assert oracle.status(founder_cell(SOS_EXPAT)).completed

    def test_language_counts(self):
        oracle = IndexedCompletionOracle(FRANCE, [
            record(),
            record(status="draft"),
            record(language_id=EN.id),
        ])

        assert oracle.language_counts(SOS_EXPAT, FR) == (1, 2)
        assert oracle.language_counts(SOS_EXPAT, EN) == (1, 1)
        assert oracle.article_counts(SOS_EXPAT) == (2, 3)


# =============================================================================
# INDEXED VS QUERY
# =============================================================================

@pytest.fixture
def mixed_content(db, add_article):
    """A spread of published, draft, NULL-status, founder and off-target content."""
    add_article(theme_type="lawyer_specialty", theme_id=SPECIALTY_IMMIGRATION)
    add_article(theme_type="lawyer_specialty", theme_id=SPECIALTY_IMMIGRATION, language="en", status="draft")
    add_article(theme_type="lawyer_specialty", theme_id=SPECIALTY_TAX, language="de")
    add_article(theme_type="expat_domain", theme_id=DOMAIN_HOUSING, language="es")
    add_article(type="pillar")
    add_article(type="pillar")
    add_article(type="pillar", status="review")
    add_article(type="comparative", language="en")
    add_article(type="landing", language="zh")
    add_article(platform_id=ULIXAI, theme_type="founder", language="fr")
    add_article(platform_id=ULIXAI, theme_type="ulixai_service", theme_id=SERVICE_VISA)
    add_article(type="founder", language="ar", status="draft")
    add_article(language="it", title="Articolo")
    add_article(country_id=BOLIVIA, theme_type="lawyer_specialty", theme_id=SPECIALTY_TAX)
    add_article(title="Portrait of Williams Jullin", language="pt")
    add_article(theme_type="lawyer_specialty", theme_id=SPECIALTY_TAX).status = None
    add_article(theme_type="founder", language="hi").status = None
    db.commit()


@pytest.mark.integration
class TestOracleEquivalence:
    """The batched fetch must not change any result."""

    @pytest.mark.parametrize("platform_id", [SOS_EXPAT, ULIXAI])
    def test_same_country_result(self, db, memory_cache, settings, mixed_content, platform_id):
        indexed = CoverageService(db, cache=memory_cache, settings=settings, indexed=True)
        per_cell = CoverageService(db, cache=memory_cache, settings=settings, indexed=False)

        assert (
            indexed.compute_country_score(platform_id, FRANCE)
            == per_cell.compute_country_score(platform_id, FRANCE)
        )

    def test_same_result_with_title_fallback(self, db, memory_cache, mixed_content):
        from coverage_engine.utils.config import Settings

        settings = Settings(_env_file=None, FOUNDER_TITLE_FALLBACK=True)
        indexed = CoverageService(db, cache=memory_cache, settings=settings, indexed=True)
        per_cell = CoverageService(db, cache=memory_cache, settings=settings, indexed=False)

        indexed_result = indexed.compute_country_score(SOS_EXPAT, FRANCE)
        assert indexed_result == per_cell.compute_country_score(SOS_EXPAT, FRANCE)
        assert indexed_result["founder_breakdown"]["pt"]["sos_expat"]["completed"] is True

    def test_cell_lookups_agree(self, db, mixed_content):
        repository = CoverageRepository(db)
        oracle = IndexedCompletionOracle.from_repository(repository, SOS_EXPAT, FRANCE)
        per_cell = QueryCompletionOracle(repository, FRANCE)

        cell = topic_cell(topic=TopicRef(
            id=SPECIALTY_IMMIGRATION, code="immigration", name="x", kind=TopicKind.LAWYER_SPECIALTY,
        ))
        assert oracle.status(cell) is per_cell.status(cell) is CompletionStatus.PUBLISHED
        assert oracle.status(founder_cell(ULIXAI)) is per_cell.status(founder_cell(ULIXAI))

    def test_null_status_is_unpublished_in_both_oracles(self, db, mixed_content):
        repository = CoverageRepository(db)
        oracle = IndexedCompletionOracle.from_repository(repository, SOS_EXPAT, FRANCE)
        per_cell = QueryCompletionOracle(repository, FRANCE)

        tax = topic_cell(topic=TopicRef(
            id=SPECIALTY_TAX, code="tax", name="x", kind=TopicKind.LAWYER_SPECIALTY,
        ))
        hindi = LanguageRef(id=9, code="hi", name="Hindi")

        assert oracle.status(tax) is per_cell.status(tax) is CompletionStatus.UNPUBLISHED
        founder = founder_cell(SOS_EXPAT, language=hindi)
        assert oracle.status(founder) is per_cell.status(founder) is CompletionStatus.UNPUBLISHED

    def test_accented_title_fallback_agrees(self, db, add_article):
        add_article(title="Rencontre avec ÉLODIE, notre fondatrice")
        repository = CoverageRepository(db)
        matcher = FounderMatcher(title_fallback=True, keywords=("élodie",))

        oracle = IndexedCompletionOracle.from_repository(
            repository, SOS_EXPAT, FRANCE, founder_matcher=matcher,
        )
        per_cell = QueryCompletionOracle(repository, FRANCE, founder_matcher=matcher)

        cell = founder_cell(SOS_EXPAT)
        assert oracle.status(cell) is per_cell.status(cell) is CompletionStatus.PUBLISHED


def test_theme_types_cover_topic_kinds():
    assert {t.value for t in ThemeType} == {k.value for k in TopicKind} | {"founder"}
