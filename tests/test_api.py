"""
HTTP tests for the coverage and cache routers.

The database dependency is overridden with the seeded in-memory session;
startup events (which would open the configured database) are not run.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from coverage_engine.database import CoverageRepository
from coverage_engine.database.session import get_db

from conftest import BOLIVIA, FRANCE, SOS_EXPAT, SPECIALTY_IMMIGRATION

pytestmark = pytest.mark.integration

BASE = "/api/coverage/intelligent"


@pytest.fixture
def client(db, memory_cache, settings, monkeypatch):
    from api import coverage
    from api.main import app
    from coverage_engine.services import CoverageService

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setattr(
        coverage, "CoverageService",
        lambda session: CoverageService(session, cache=memory_cache, settings=settings),
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestCoverageEndpoints:
    """Test coverage endpoints."""

    def test_dashboard(self, client):
        response = client.get(f"{BASE}/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["total_countries"] == 3
        assert "meta" not in body

    def test_countries_unpaginated(self, client):
        body = client.get(f"{BASE}/countries").json()

        assert [c["code"] for c in body["data"]] == ["BO", "FR", "TH"]
        assert body["meta"] == {"total": 3}

    def test_countries_paginated(self, client):
        body = client.get(f"{BASE}/countries", params={"page": 2, "per_page": 2}).json()

        assert [c["code"] for c in body["data"]] == ["TH"]
        assert body["meta"] == {"current_page": 2, "per_page": 2, "total": 3, "last_page": 2}

    def test_countries_filters(self, client):
        body = client.get(f"{BASE}/countries", params={"region": "Europe", "sort_by": "name"}).json()

        assert [c["code"] for c in body["data"]] == ["FR"]

    def test_countries_invalid_sort_field(self, client):
        response = client.get(f"{BASE}/countries", params={"sort_by": "population"})

        assert response.status_code == 422
        assert "population" in response.json()["detail"]

    def test_countries_invalid_sort_order(self, client):
        assert client.get(f"{BASE}/countries", params={"sort_order": "sideways"}).status_code == 422

    def test_country_details(self, client, add_article):
        add_article(theme_type="lawyer_specialty", theme_id=SPECIALTY_IMMIGRATION)

        data = client.get(f"{BASE}/countries/{FRANCE}").json()["data"]

        assert data["country_code"] == "FR"
        assert data["published_articles"] == 1
        assert len(data["recent_articles"]) == 1

    def test_store_failure_returns_500(self, client, monkeypatch):
        def unavailable(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(CoverageRepository, "fetch_coverage_content", unavailable)

        response = client.get(f"{BASE}/countries/{FRANCE}")

        assert response.status_code == 500
        assert response.json()["detail"] == "Country details failed"

    def test_unknown_country(self, client):
        data = client.get(f"{BASE}/countries/999").json()["data"]

        assert data["country_name"] == "Unknown"
        assert data["status"] == "missing"

    @pytest.mark.parametrize("dimension", ["recruitment", "awareness", "founder"])
    def test_dimension_endpoints(self, client, dimension):
        data = client.get(f"{BASE}/countries/{FRANCE}/{dimension}").json()["data"]

        assert data["country_id"] == FRANCE
        assert data[f"{dimension}_score"] == 0
        assert "breakdown" in data

    def test_founder(self, client):
        data = client.get(f"{BASE}/founder").json()["data"]

        assert data["founder_name"] == "Williams Jullin"
        assert data["total_countries"] == 3

    def test_languages(self, client, add_article):
        add_article(country_id=BOLIVIA, language="es")

        data = client.get(f"{BASE}/languages").json()["data"]

        assert data["es"]["countries_covered"] == 1
        assert data["es"]["coverage_percent"] == 33.33

    def test_specialties(self, client):
        data = client.get(f"{BASE}/specialties", params={"type": "expat_domain"}).json()["data"]

        assert list(data) == ["expat_domains"]
        assert [d["code"] for d in data["expat_domains"]] == ["housing", "banking"]

    def test_specialties_unknown_type(self, client):
        assert client.get(f"{BASE}/specialties", params={"type": "hobbies"}).status_code == 422

    def test_recommendations_priority_filter(self, client):
        data = client.get(f"{BASE}/recommendations", params={"limit": 30, "priority": "low"}).json()["data"]

        assert data
        assert all(r["type"] == "low" for r in data)
        assert {r["action"] for r in data} == {"translate_content"}

    def test_matrix(self, client):
        data = client.get(f"{BASE}/matrix", params={"region": "Asia"}).json()["data"]

        assert data["type"] == "language"
        assert [row["country_code"] for row in data["rows"]] == ["TH"]

    def test_generate(self, client):
        response = client.post(f"{BASE}/generate", json={
            "platform_id": SOS_EXPAT,
            "country_ids": [FRANCE, BOLIVIA],
            "languages": ["fr", "en"],
            "content_types": ["awareness"],
        })

        assert response.status_code == 200
        summary = response.json()["data"]["summary"]
        assert summary["total_tasks"] == 4
        assert summary["estimated_cost"] == 0.8
        assert summary["estimated_duration"] == "8 minutes"

    def test_generate_validation(self, client):
        unsupported = client.post(f"{BASE}/generate", json={
            "platform_id": SOS_EXPAT,
            "country_ids": [FRANCE],
            "languages": ["it"],
            "content_types": ["awareness"],
        })
        empty = client.post(f"{BASE}/generate", json={
            "platform_id": SOS_EXPAT,
            "country_ids": [],
            "languages": ["fr"],
            "content_types": ["awareness"],
        })

        assert unsupported.status_code == 422
        assert empty.status_code == 422


class TestCacheEndpoints:
    """Test cache management endpoints."""

    def test_invalidate_country(self, client, memory_cache):
        client.get(f"{BASE}/countries/{FRANCE}")

        response = client.post("/api/coverage/cache/invalidate", json={
            "platform_id": SOS_EXPAT, "country_id": FRANCE,
        })

        assert response.status_code == 200
        assert response.json()["event"] == "manual_invalidate"
        assert response.json()["keys_invalidated"] == 1
        assert memory_cache.get(memory_cache.country_key(SOS_EXPAT, FRANCE)) is None

    def test_invalidate_all(self, client):
        client.get(f"{BASE}/dashboard")

        body = client.post("/api/coverage/cache/invalidate", json={}).json()

        assert body["event"] == "manual_invalidate_all"
        assert body["keys_invalidated"] == 4

    def test_invalidate_country_requires_platform(self, client):
        response = client.post("/api/coverage/cache/invalidate", json={"country_id": FRANCE})

        assert response.status_code == 422

    def test_stats(self, client):
        client.get(f"{BASE}/countries/{FRANCE}")
        client.get(f"{BASE}/countries/{FRANCE}")

        stats = client.get("/api/coverage/cache/stats").json()

        assert stats["backend"] == "memory"
        assert stats["hits"] == 1

    def test_health(self, client):
        body = client.get("/api/coverage/cache/health").json()

        assert body["healthy"] is True
        assert body["status"] == "memory"

    def test_liveness(self, client):
        assert client.get("/health").json()["status"] == "ok"
