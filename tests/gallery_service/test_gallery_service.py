from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from loguru import logger

from src.gallery_service.app.core.config import Settings, get_project_root
from src.gallery_service.app.core.logging import configure_logging
from src.gallery_service.app.db.database import check_database_health
from src.gallery_service.main import create_app


class TestGalleryServiceLifecycle:
    @pytest.fixture
    def client(self, test_container):
        return TestClient(create_app())

    def test_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "gallery"}

    @pytest.mark.parametrize(
        "path",
        [
            "/api/images/user",
            "/api/images/liked",
            "/api/images/collection",
            "/api/images/stats",
            "/api/auth/me",
        ],
    )
    def test_protected_routes_mounted(self, client, path):
        response = client.get(path)

        assert response.status_code == 401

    def test_unknown_route_uses_error_shape(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.json()["success"] is False

    async def test_database_health(self):
        assert await check_database_health() is True


class TestGalleryServiceConfiguration:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.PORT == 8000
        assert settings.MAX_FILE_SIZE == 5 * 1024 * 1024
        assert settings.DESCRIPTION_MAX_LENGTH == 500
        assert settings.DEFAULT_PAGE_SIZE == 20
        assert settings.MAX_PAGE_SIZE == 100
        assert settings.GEMINI_MODEL == "gemini-2.5-flash"
        assert settings.AUTO_CAPTION_ON_UPLOAD is False

    def test_relative_paths_resolve_against_project_root(self):
        settings = Settings(_env_file=None)
        root = get_project_root()

        assert settings.absolute_uploads_dir == str(root / "storage/uploads")
        assert settings.absolute_database_url == (
            f"sqlite:///{root / 'storage/databases/gallery.db'}"
        )

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MAX_PAGE_SIZE", "50")
        monkeypatch.setenv("AUTO_CAPTION_ON_UPLOAD", "true")

        settings = Settings(_env_file=None)

        assert settings.MAX_PAGE_SIZE == 50
        assert settings.AUTO_CAPTION_ON_UPLOAD is True

    def test_jwt_config(self, test_settings):
        assert test_settings.jwt_config == {
            "secret_key": "test-secret-key",
            "algorithm": "HS256",
            "access_token_expire_minutes": 7 * 24 * 60,
        }


class TestLoggingConfiguration:
    def test_writes_to_configured_file(self, test_settings):
        configure_logging(test_settings)
        logger.warning("gallery log line")
        logger.complete()

        log_file = Path(test_settings.absolute_log_file)
        assert log_file.exists()
        assert "gallery log line" in log_file.read_text(encoding="utf-8")

        logger.remove()
