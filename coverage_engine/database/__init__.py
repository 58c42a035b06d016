"""
Coverage Engine Database Layer

Read-only view of the content store: reference data, taxonomies and
articles. All queries go through CoverageRepository.

Usage:
    from coverage_engine.database import get_db_context, CoverageRepository

    with get_db_context() as db:
        repo = CoverageRepository(db)
        countries = repo.list_countries()
"""

# Models
from .models import (
    Base,
    ArticleStatus,
    ThemeType,
    ArticleType,
    Platform,
    Country,
    Language,
    LawyerSpecialty,
    ExpatDomain,
    Service,
    Article,
)

# Session management
from .session import (
    get_database_url,
    create_db_engine,
    get_engine,
    get_session_factory,
    get_db,
    get_db_context,
    init_db,
    check_db_connection,
)

# Repository
from .repository import CoverageRepository

__all__ = [
    # Models
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
    # Session
    "get_database_url",
    "create_db_engine",
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_db_context",
    "init_db",
    "check_db_connection",
    # Repository
    "CoverageRepository",
]
