"""
SQLAlchemy Models for the Coverage Engine

The engine only reads these tables. Reference data (platforms, countries,
languages, taxonomies) is managed by editorial administration and articles
are written by the authoring pipeline.

Design Principles:
1. Mirror the content store columns the scoring needs, nothing more
2. Index every column the batched coverage fetch filters on
3. Keep taxonomy kinds as separate tables (different admin lifecycles)
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, Text,
    ForeignKey, Index,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


# =============================================================================
# ENUMS
# =============================================================================

class ArticleStatus(enum.Enum):
    """Publication state of an article. Only PUBLISHED satisfies a target."""
    DRAFT = "draft"
    REVIEW = "review"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ThemeType(enum.Enum):
    """Taxonomy an article is classified under (articles.theme_type)."""
    LAWYER_SPECIALTY = "lawyer_specialty"
    EXPAT_DOMAIN = "expat_domain"
    SERVICE = "ulixai_service"
    FOUNDER = "founder"


class ArticleType(enum.Enum):
    """Coarse content type (articles.type)."""
    ARTICLE = "article"
    PILLAR = "pillar"
    COMPARATIVE = "comparative"
    LANDING = "landing"
    FOUNDER = "founder"


# =============================================================================
# REFERENCE DATA
# =============================================================================

class Platform(Base):
    """Publishing platform (SOS-Expat, Ulixai)"""
    __tablename__ = "platforms"

    id = Column(Integer, primary_key=True)
    slug = Column(String(50), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)


class Country(Base):
    """Country reference list"""
    __tablename__ = "countries"

    id = Column(Integer, primary_key=True)
    code = Column(String(2), nullable=False)  # ISO 3166-1 alpha-2
    name = Column(String(255), nullable=False)
    region = Column(String(100), default="")

    __table_args__ = (
        Index("idx_country_code", "code"),
    )


class Language(Base):
    """Languages known to the content store"""
    __tablename__ = "languages"

    id = Column(Integer, primary_key=True)
    code = Column(String(10), unique=True, nullable=False)
    name = Column(String(100), nullable=False)


# =============================================================================
# TAXONOMIES
# =============================================================================

class LawyerSpecialty(Base):
    """Lawyer specialties (SOS-Expat recruitment)"""
    __tablename__ = "lawyer_specialties"

    id = Column(Integer, primary_key=True)
    code = Column(String(100), unique=True, nullable=False)
    name_fr = Column(String(255), nullable=False)
    category_code = Column(String(100))
    order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)


class ExpatDomain(Base):
    """Help domains for expatriate helpers (SOS-Expat recruitment)"""
    __tablename__ = "expat_domains"

    id = Column(Integer, primary_key=True)
    code = Column(String(100), unique=True, nullable=False)
    name_fr = Column(String(255), nullable=False)
    order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)


class Service(Base):
    """Hierarchical service tree (Ulixai recruitment). Only leaves are targets."""
    __tablename__ = "ulixai_services"

    id = Column(Integer, primary_key=True)
    parent_id = Column(Integer, ForeignKey("ulixai_services.id"), nullable=True)
    code = Column(String(100), unique=True, nullable=False)
    name_fr = Column(String(255), nullable=False)
    level = Column(Integer, default=1)
    order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

    parent = relationship("Service", remote_side=[id], back_populates="children")
    children = relationship("Service", back_populates="parent")


# =============================================================================
# CONTENT
# =============================================================================

class Article(Base):
    """Content item. The engine only checks existence, classification and status."""
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True)
    platform_id = Column(Integer, ForeignKey("platforms.id"), nullable=False)
    country_id = Column(Integer, ForeignKey("countries.id"), nullable=False)
    language_id = Column(Integer, ForeignKey("languages.id"), nullable=False)

    # Classification
    type = Column(String(50), default=ArticleType.ARTICLE.value)
    theme_type = Column(String(50), nullable=True)
    theme_id = Column(Integer, nullable=True)

    title = Column(Text, nullable=False)
    status = Column(String(20), default=ArticleStatus.DRAFT.value)

    # Timestamps
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    language = relationship("Language")

    __table_args__ = (
        Index("idx_article_coverage", "platform_id", "country_id", "language_id"),
        Index("idx_article_theme", "theme_type", "theme_id"),
        Index("idx_article_status", "status"),
    )

    @property
    def is_published(self) -> bool:
        return self.status == ArticleStatus.PUBLISHED.value


__all__ = [
    "Base",
    "ArticleStatus",
    "ThemeType",
    "ArticleType",
    "Platform",
    "Country",
    "Language",
    "LawyerSpecialty",
    "ExpatDomain",
    "Service",
    "Article",
]
