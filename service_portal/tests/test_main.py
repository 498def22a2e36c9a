"""
HTTP tests for the portal service.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from shared.config import get_config
from shared.errors import DataStoreError
from service_portal.app.main import PortalService


@pytest.fixture
def service(data_store):
    return PortalService(config=get_config("portal", 8020), data_store=data_store)


@pytest.fixture
def client(service):
    with TestClient(service.app) as client:
        yield client


class TestPortalService:
    """Test cases for the portal HTTP surface."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "portal"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["dependencies"] == {"data_store": "ok"}

    def test_health_reports_data_store_error(self, client, data_store):
        with patch.object(data_store, "health_check", AsyncMock(side_effect=DataStoreError("fake", "down"))):
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["dependencies"] == {"data_store": "error"}

    def test_startup_and_shutdown_drive_data_store(self, service, data_store):
        with patch.object(data_store, "start", AsyncMock()) as start, \
                patch.object(data_store, "stop", AsyncMock()) as stop:
            with TestClient(service.app):
                start.assert_awaited_once()
            stop.assert_awaited_once()

    def test_profile_read_is_cached(self, client, data_store):
        first = client.get("/profiles/u1")
        second = client.get("/profiles/u1")

        assert first.status_code == 200
        assert first.json()["email"] == "leyla@example.com"
        assert second.json() == first.json()
        assert data_store.count("select", "profiles") == 1

    def test_missing_profile(self, client):
        response = client.get("/profiles/ghost")

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "NOT_FOUND"
        assert body["request_id"] == response.headers["x-request-id"]

    def test_profile_update_visible_on_next_read(self, client, data_store):
        client.get("/profiles/u1")

        response = client.patch("/profiles/u1", json={"city": "Baku"})
        assert response.status_code == 200

        profile = client.get("/profiles/u1").json()
        assert profile["city"] == "Baku"
        assert data_store.count("select", "profiles") == 2

    def test_profile_update_rejects_unknown_fields(self, client):
        response = client.patch("/profiles/u1", json={"role": "teacher"})

        assert response.status_code == 422

    def test_record_login(self, client):
        response = client.post("/profiles/u1/last-login")

        assert response.status_code == 204
        assert client.get("/profiles/u1").json()["last_login"] is not None

    def test_data_store_failure(self, client, data_store):
        data_store.fail_next("select", DataStoreError("fake", "connection reset"))

        response = client.get("/profiles/u1")

        assert response.status_code == 502
        assert response.json()["code"] == "DATA_STORE_ERROR"
        assert client.get("/profiles/u1").status_code == 200

    def test_news_create_and_list(self, client):
        assert len(client.get("/admin/news").json()) == 2

        response = client.post("/admin/news", json={
            "title": "HR Compliance Workshop",
            "excerpt": "Free workshop",
            "content": "Full content about the HR workshop...",
            "category": "Events",
            "date": "2025-12-10",
        })
        assert response.status_code == 201

        news = client.get("/admin/news").json()
        assert [item["id"] for item in news][0] == response.json()["id"]
        assert len(news) == 3

    def test_news_update_and_delete(self, client):
        client.get("/admin/news/news-1")

        response = client.put("/admin/news/news-1", json={"title": "SERP 2.0"})
        assert response.status_code == 200
        assert client.get("/admin/news/news-1").json()["title"] == "SERP 2.0"

        assert client.delete("/admin/news/news-1").status_code == 204
        assert client.get("/admin/news/news-1").status_code == 404

    def test_trainings(self, client):
        trainings = client.get("/admin/trainings").json()

        assert [item["id"] for item in trainings] == ["serp-basics", "hr-management"]
        assert client.get("/admin/trainings/missing").status_code == 404

    def test_user_role_change(self, client):
        assert client.get("/admin/users/u1").json()["role"] == "staff"

        response = client.put("/admin/users/u1/role", json={"role": "teacher"})

        assert response.status_code == 200
        assert client.get("/admin/users/u1").json()["role"] == "teacher"
        assert client.get("/profiles/u1").json()["role"] == "teacher"

    def test_cache_stats_and_clear(self, client):
        client.get("/profiles/u1")
        client.get("/admin/news")

        stats = client.get("/cache/stats").json()
        assert stats["total"] == 2
        assert stats["valid"] == 2
        assert stats["pending_reads"] == 0
        assert stats["default_ttl_seconds"] == 300.0

        assert client.delete("/cache").json() == {"cleared": 2}
        assert client.get("/cache/stats").json()["total"] == 0

    def test_invalidate_by_pattern(self, client, data_store):
        client.get("/admin/news")
        client.get("/admin/trainings")

        response = client.post("/cache/invalidate", json={"pattern": "^get_news"})

        assert response.json() == {"pattern": "^get_news", "invalidated": 1}
        client.get("/admin/news")
        client.get("/admin/trainings")
        assert data_store.count("select", "news") == 2
        assert data_store.count("select", "trainings") == 1

    def test_invalid_pattern(self, client):
        response = client.post("/cache/invalidate", json={"pattern": "(unclosed"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_metrics_endpoint(self, client):
        client.get("/profiles/u1")
        client.get("/profiles/u1")

        body = client.get("/metrics").text

        assert 'cache_hits_total{query="get_user_profile"} 1.0' in body
        assert 'cache_misses_total{query="get_user_profile"} 1.0' in body
