"""
Repository Layer - Clean Interface for Coverage Queries

Every query the coverage engine issues lives here. The scoring code only
sees the plain records from coverage_engine.coverage.models.

Two access patterns are offered for content existence:
- fetch_coverage_content(): one batched query per (platform, country),
  indexed in memory by IndexedCompletionOracle
- the per-cell methods (topic_status, count_published_of_type, ...), used by
  QueryCompletionOracle to verify the batched path gives identical output
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import and_, case, distinct, exists, func, or_
from sqlalchemy.orm import Session, aliased

from .models import (
    Article, ArticleStatus, ArticleType, Country, ExpatDomain, Language, LawyerSpecialty,
    Service, ThemeType,
)
from coverage_engine.coverage.founder import FounderMatcher, title_mentions_founder
from coverage_engine.coverage.models import (
    CompletionStatus, ContentRecord, CountryRef, LanguageRef, TopicKind, TopicRef,
)

logger = logging.getLogger(__name__)

PUBLISHED = ArticleStatus.PUBLISHED.value

# A NULL status is "not published", never "no article"
IS_PUBLISHED = Article.status == PUBLISHED
IS_UNPUBLISHED = or_(Article.status.is_(None), Article.status != PUBLISHED)


def _founder_clause():
    """Explicit founder classification (theme_type or type)."""
    return or_(
        Article.theme_type == ThemeType.FOUNDER.value,
        Article.type == ArticleType.FOUNDER.value,
    )


def _founder_candidates(matcher: FounderMatcher):
    """
    Rows that may be founder content.

    Title matching is done in Python by FounderMatcher on every path, since
    SQL lower() only folds ASCII on SQLite and accented keywords would
    match differently than in the indexed oracle.
    """
    if matcher.title_fallback:
        return or_(_founder_clause(), Article.title.isnot(None))
    return _founder_clause()


def _status_from_flags(published: bool, unpublished: bool) -> CompletionStatus:
    if published:
        return CompletionStatus.PUBLISHED
    if unpublished:
        return CompletionStatus.UNPUBLISHED
    return CompletionStatus.MISSING


def _to_record(row) -> ContentRecord:
    return ContentRecord(
        platform_id=row[0],
        country_id=row[1],
        language_id=row[2],
        type=row[3],
        theme_type=row[4],
        theme_id=row[5],
        status=row[6] or "",
        title=row[7] or "",
    )


CONTENT_COLUMNS = (
    Article.platform_id,
    Article.country_id,
    Article.language_id,
    Article.type,
    Article.theme_type,
    Article.theme_id,
    Article.status,
    Article.title,
)


class CoverageRepository:
    """Read access to reference data and content existence facts."""

    def __init__(self, db: Session):
        self.db = db

    # =========================================================================
    # Reference data
    # =========================================================================

    def list_languages(self, codes: Sequence[str]) -> List[LanguageRef]:
        """Languages among `codes` that exist in the store, in `codes` order."""
        rows = self.db.query(Language).filter(Language.code.in_(list(codes))).all()
        by_code = {row.code: row for row in rows}
        return [
            LanguageRef(id=by_code[code].id, code=code, name=by_code[code].name)
            for code in codes
            if code in by_code
        ]

    def list_countries(self, order_by_name: bool = False) -> List[CountryRef]:
        query = self.db.query(Country)
        query = query.order_by(Country.name, Country.id) if order_by_name else query.order_by(Country.id)
        return [
            CountryRef(id=c.id, code=c.code or "", name=c.name, region=c.region or "")
            for c in query.all()
        ]

    def get_country(self, country_id: int) -> Optional[CountryRef]:
        country = self.db.query(Country).filter(Country.id == country_id).first()
        if country is None:
            return None
        return CountryRef(
            id=country.id,
            code=country.code or "",
            name=country.name,
            region=country.region or "",
        )

    def count_countries(self) -> int:
        return self.db.query(func.count(Country.id)).scalar() or 0

    def list_topics(self, kind: TopicKind) -> List[TopicRef]:
        """Active topics of one taxonomy kind (leaves only for services)."""
        if kind is TopicKind.LAWYER_SPECIALTY:
            rows = (
                self.db.query(LawyerSpecialty)
                .filter(LawyerSpecialty.is_active.is_(True))
                .order_by(LawyerSpecialty.order, LawyerSpecialty.id)
                .all()
            )
            return [
                TopicRef(id=r.id, code=r.code, name=r.name_fr, kind=kind, category=r.category_code)
                for r in rows
            ]

        if kind is TopicKind.EXPAT_DOMAIN:
            rows = (
                self.db.query(ExpatDomain)
                .filter(ExpatDomain.is_active.is_(True))
                .order_by(ExpatDomain.order, ExpatDomain.id)
                .all()
            )
            return [TopicRef(id=r.id, code=r.code, name=r.name_fr, kind=kind) for r in rows]

        child = aliased(Service)
        parent = aliased(Service)
        has_active_child = exists().where(
            and_(child.parent_id == Service.id, child.is_active.is_(True))
        )
        rows = (
            self.db.query(Service.id, Service.code, Service.name_fr, parent.name_fr)
            .outerjoin(parent, Service.parent_id == parent.id)
            .filter(Service.is_active.is_(True), ~has_active_child)
            .order_by(Service.order, Service.id)
            .all()
        )
        return [
            TopicRef(id=r[0], code=r[1], name=r[2], kind=kind, parent_name=r[3])
            for r in rows
        ]

    # =========================================================================
    # Batched content fetch
    # =========================================================================

    def fetch_coverage_content(
        self,
        platform_id: int,
        country_id: int,
        founder_platform_ids: Iterable[int],
        founder_matcher: FounderMatcher,
    ) -> List[ContentRecord]:
        """
        All content of the country on the requested platform, plus founder
        content of the country on every founder platform, in one query.
        """
        rows = (
            self.db.query(*CONTENT_COLUMNS)
            .filter(
                Article.country_id == country_id,
                or_(
                    Article.platform_id == platform_id,
                    and_(
                        Article.platform_id.in_(list(founder_platform_ids)),
                        _founder_candidates(founder_matcher),
                    ),
                ),
            )
            .all()
        )
        logger.debug(
            f"Fetched {len(rows)} content rows for platform {platform_id}, country {country_id}"
        )
        records = [_to_record(r) for r in rows]
        return [
            record for record in records
            if record.platform_id == platform_id or founder_matcher.matches(record)
        ]

    # =========================================================================
    # Per-cell queries
    # =========================================================================

    def _cell_query(self, platform_id: int, country_id: int, language_id: int):
        return self.db.query(Article.id).filter(
            Article.platform_id == platform_id,
            Article.country_id == country_id,
            Article.language_id == language_id,
        )

    def _exists(self, query) -> bool:
        return self.db.query(query.exists()).scalar()

    def topic_status(
        self,
        platform_id: int,
        country_id: int,
        language_id: int,
        theme_type: str,
        theme_id: int,
    ) -> CompletionStatus:
        base = self._cell_query(platform_id, country_id, language_id).filter(
            Article.theme_type == ThemeType(theme_type).value,
            Article.theme_id == theme_id,
        )
        published = self._exists(base.filter(IS_PUBLISHED))
        unpublished = not published and self._exists(base.filter(IS_UNPUBLISHED))
        return _status_from_flags(published, unpublished)

    def count_published_of_type(
        self,
        platform_id: int,
        country_id: int,
        language_id: int,
        content_type: str,
    ) -> int:
        return (
            self._cell_query(platform_id, country_id, language_id)
            .filter(Article.type == content_type, IS_PUBLISHED)
            .count()
        )

    def founder_status(
        self,
        platform_id: int,
        country_id: int,
        language_id: int,
        matcher: FounderMatcher,
    ) -> CompletionStatus:
        if not matcher.title_fallback:
            base = self._cell_query(platform_id, country_id, language_id).filter(_founder_clause())
            published = self._exists(base.filter(IS_PUBLISHED))
            unpublished = not published and self._exists(base.filter(IS_UNPUBLISHED))
            return _status_from_flags(published, unpublished)

        rows = (
            self.db.query(*CONTENT_COLUMNS)
            .filter(
                Article.platform_id == platform_id,
                Article.country_id == country_id,
                Article.language_id == language_id,
                _founder_candidates(matcher),
            )
            .all()
        )
        matched = [record for record in map(_to_record, rows) if matcher.matches(record)]
        published = any(record.is_published for record in matched)
        return _status_from_flags(published, bool(matched))

    def language_counts(self, platform_id: int, country_id: int, language_id: int) -> Tuple[int, int]:
        """(published, total) article counts for one language of a country."""
        base = self._cell_query(platform_id, country_id, language_id)
        return base.filter(IS_PUBLISHED).count(), base.count()

    def article_counts(self, platform_id: int, country_id: int) -> Tuple[int, int]:
        """(published, total) article counts for a country, all languages."""
        base = self.db.query(Article.id).filter(
            Article.platform_id == platform_id,
            Article.country_id == country_id,
        )
        return base.filter(IS_PUBLISHED).count(), base.count()

    # =========================================================================
    # Platform-wide aggregates
    # =========================================================================

    def language_totals(self, platform_id: int) -> Dict[int, Dict[str, int]]:
        """
        Per language_id: total, published and distinct countries with
        published content, for a whole platform, in one grouped query.
        """
        rows = (
            self.db.query(
                Article.language_id,
                func.count(Article.id),
                func.sum(case((IS_PUBLISHED, 1), else_=0)),
                func.count(distinct(case((IS_PUBLISHED, Article.country_id)))),
            )
            .filter(Article.platform_id == platform_id)
            .group_by(Article.language_id)
            .all()
        )
        return {
            r[0]: {
                "total": int(r[1] or 0),
                "published": int(r[2] or 0),
                "countries_covered": int(r[3] or 0),
            }
            for r in rows
        }

    def recent_articles(self, platform_id: int, country_id: int, limit: int = 50) -> List[Dict]:
        rows = (
            self.db.query(Article, Language.code)
            .outerjoin(Language, Article.language_id == Language.id)
            .filter(
                Article.platform_id == platform_id,
                Article.country_id == country_id,
            )
            .order_by(Article.created_at.desc(), Article.id.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": article.id,
                "title": article.title,
                "type": article.type,
                "language": language_code,
                "theme_type": article.theme_type,
                "status": article.status,
                "is_published": article.status == PUBLISHED,
                "published_at": article.published_at.isoformat() if article.published_at else None,
                "created_at": article.created_at.isoformat() if article.created_at else None,
            }
            for article, language_code in rows
        ]

    # =========================================================================
    # One-shot migration
    # =========================================================================

    def backfill_founder_classification(
        self,
        keywords: Sequence[str],
        dry_run: bool = False,
    ) -> int:
        """
        Tag unclassified legacy articles whose title names the founder.

        Only rows with an empty theme_type are touched. Titles are matched
        with title_mentions_founder, the same rule the scoring fallback uses.
        Returns the number of rows matched (and updated unless dry_run).
        """
        keywords = [keyword for keyword in keywords if keyword]
        if not keywords:
            return 0

        candidates = (
            self.db.query(Article.id, Article.title)
            .filter(
                or_(Article.theme_type.is_(None), Article.theme_type == ""),
                Article.title.isnot(None),
            )
            .all()
        )
        ids = [row[0] for row in candidates if title_mentions_founder(row[1], keywords)]

        if dry_run:
            logger.info(f"Founder backfill dry run: {len(ids)} articles would be tagged")
            return len(ids)
        if not ids:
            return 0

        count = (
            self.db.query(Article)
            .filter(Article.id.in_(ids))
            .update({Article.theme_type: ThemeType.FOUNDER.value}, synchronize_session=False)
        )
        self.db.commit()
        logger.info(f"Founder backfill tagged {count} articles")
        return count
