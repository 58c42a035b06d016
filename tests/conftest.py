"""
Pytest Configuration and Shared Fixtures

Provides an in-memory content store seeded with reference data, an article
factory, settings and a score cache with a controllable clock.

Seeded reference data:
- 9 supported languages (+ Italian, which is not supported)
- Platforms: 1 SOS-Expat, 2 Ulixai
- Countries: Bolivia (2), France (1), Thailand (3) - name order differs from id order
- Lawyer specialties: 2 active, 1 inactive
- Expat domains: 2 active
- Services: Démarches > Visa (leaf), Démarches > Permis (inactive),
  Traduction (leaf), Transport > Navette (inactive) so Transport is a leaf
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coverage_engine.cache import CacheConfig, MemoryScoreCache, set_score_cache
from coverage_engine.database.models import (
    Article, Base, Country, ExpatDomain, Language, LawyerSpecialty,
    Platform, Service,
)
from coverage_engine.utils.config import Settings


LANGUAGE_IDS = {
    "fr": 1, "en": 2, "de": 3, "es": 4, "pt": 5,
    "ru": 6, "zh": 7, "ar": 8, "hi": 9, "it": 10,
}
SUPPORTED = ["fr", "en", "de", "es", "pt", "ru", "zh", "ar", "hi"]

FRANCE = 1
BOLIVIA = 2
THAILAND = 3

SOS_EXPAT = 1
ULIXAI = 2

SPECIALTY_IMMIGRATION = 1
SPECIALTY_TAX = 2
DOMAIN_HOUSING = 1
SERVICE_VISA = 2


# ============================================================================
# Helpers
# ============================================================================

class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def seed_reference_data(db) -> None:
    names = {
        "fr": "Français", "en": "English", "de": "Deutsch", "es": "Español",
        "pt": "Português", "ru": "Русский", "zh": "中文", "ar": "العربية",
        "hi": "हिन्दी", "it": "Italiano",
    }
    # Inserted in reverse so list_languages() has to restore the fixed order
    for code, language_id in sorted(LANGUAGE_IDS.items(), key=lambda item: -item[1]):
        db.add(Language(id=language_id, code=code, name=names[code]))

    db.add_all([
        Platform(id=SOS_EXPAT, slug="sos-expat", name="SOS-Expat"),
        Platform(id=ULIXAI, slug="ulixai", name="Ulixai"),
    ])

    db.add_all([
        Country(id=FRANCE, code="FR", name="France", region="Europe"),
        Country(id=BOLIVIA, code="BO", name="Bolivia", region="South America"),
        Country(id=THAILAND, code="TH", name="Thailand", region="Asia"),
    ])

    db.add_all([
        LawyerSpecialty(id=SPECIALTY_IMMIGRATION, code="immigration", name_fr="Droit de l'immigration",
                        category_code="public", order=1),
        LawyerSpecialty(id=SPECIALTY_TAX, code="tax", name_fr="Droit fiscal", category_code="business", order=2),
        LawyerSpecialty(id=3, code="maritime", name_fr="Droit maritime", order=3, is_active=False),
    ])

    db.add_all([
        ExpatDomain(id=DOMAIN_HOUSING, code="housing", name_fr="Logement", order=1),
        ExpatDomain(id=2, code="banking", name_fr="Banque", order=2),
    ])

    db.add_all([
        Service(id=1, code="procedures", name_fr="Démarches", level=1, order=1),
        Service(id=SERVICE_VISA, parent_id=1, code="visa", name_fr="Visa", level=2, order=1),
        Service(id=3, parent_id=1, code="permit", name_fr="Permis", level=2, order=2, is_active=False),
        Service(id=4, code="translation", name_fr="Traduction", level=1, order=2),
        Service(id=5, code="transport", name_fr="Transport", level=1, order=3),
        Service(id=6, parent_id=5, code="shuttle", name_fr="Navette", level=2, order=1, is_active=False),
    ])

    db.commit()


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection (TestClient uses threads)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    """Session on a seeded content store."""
    session = sessionmaker(bind=engine)()
    seed_reference_data(session)
    yield session
    session.close()


@pytest.fixture
def add_article(db):
    """
    Article factory.

    Usage:
        add_article(language="fr", theme_type="lawyer_specialty", theme_id=1)
    """
    counter = {"created": 0}

    def _add(
        platform_id: int = SOS_EXPAT,
        country_id: int = FRANCE,
        language: str = "fr",
        type: str = "article",
        theme_type: str = None,
        theme_id: int = None,
        status: str = "published",
        title: str = "Guide",
    ) -> Article:
        counter["created"] += 1
        created_at = datetime(2024, 1, 1) + timedelta(minutes=counter["created"])
        article = Article(
            platform_id=platform_id,
            country_id=country_id,
            language_id=LANGUAGE_IDS[language],
            type=type,
            theme_type=theme_type,
            theme_id=theme_id,
            status=status,
            title=title,
            created_at=created_at,
            published_at=created_at if status == "published" else None,
        )
        db.add(article)
        db.commit()
        return article

    return _add


# ============================================================================
# Settings and Cache Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Settings that ignore any local .env file."""
    return Settings(_env_file=None, LANGUAGE_ARTICLE_TARGET=4)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_config():
    return CacheConfig(namespace="test", enabled=True, backend="memory")


@pytest.fixture
def memory_cache(cache_config, clock):
    """In-process cache installed as the process-wide singleton."""
    cache = MemoryScoreCache(cache_config, clock=clock)
    set_score_cache(cache)
    yield cache
    set_score_cache(None)


@pytest.fixture
def service(db, memory_cache, settings):
    from coverage_engine.services import CoverageService
    return CoverageService(db, cache=memory_cache, settings=settings)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that go through the database or HTTP layer"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
