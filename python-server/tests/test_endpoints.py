"""Tests for the health and info endpoints."""

import pytest
from fastapi.testclient import TestClient

from main import app


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


class TestHealthEndpoint:
    def test_health_returns_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["uptime_seconds"] >= 0
        assert data["python_version"].count(".") == 2


class TestRootEndpoint:
    def test_root_lists_image_endpoints(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Image Studio Server"
        assert data["status"] == "running"
        assert data["endpoints"]["images_edit"] == "POST /api/images/edit"
        assert set(data["endpoints"]) >= {
            "images_generate",
            "images_variations",
            "images_resize",
            "images_mask",
            "images_save",
        }

    def test_lifespan_logs_missing_key(self, monkeypatch, caplog):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        with caplog.at_level("INFO"), TestClient(app) as client:
            assert client.get("/health").status_code == 200

        assert any("API Key: MISSING" in record.getMessage() for record in caplog.records)
