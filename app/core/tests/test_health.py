"""
Tests for the health check endpoint.
"""

import pytest


@pytest.mark.django_db
class TestHealthCheck:
    def test_healthy(self, client, settings, tmp_path):
        settings.CONTENT_BLOBS_DIR = str(tmp_path)
        settings.CONTENT_PREVIEWS_DIR = str(tmp_path)

        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "database": "connected",
            "storage": "writable",
        }

    def test_missing_storage_directory(self, client, settings, tmp_path):
        settings.CONTENT_BLOBS_DIR = str(tmp_path / "absent")
        settings.CONTENT_PREVIEWS_DIR = str(tmp_path)

        response = client.get("/health/")

        assert response.status_code == 503
        assert response.json()["storage"] == "unavailable"
