import io
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from PIL import Image
from tortoise import Tortoise

from src.gallery_service.app.api import ai, auth, images, internal
from src.gallery_service.app.api.error_handlers import register_exception_handlers
from src.gallery_service.app.core.config import Settings
from src.gallery_service.app.core.dependencies import (
    ServiceContainer,
    get_current_user,
    override_container_for_testing,
    restore_container,
)
from src.gallery_service.app.db.database import MODEL_MODULES
from src.gallery_service.app.models import Image as ImageModel
from src.gallery_service.app.models import Like, User
from src.gallery_service.app.services.auth import AuthService
from src.gallery_service.app.services.caption_generation import (
    CaptionGenerationService,
)
from src.gallery_service.app.services.collection_aggregator import (
    CollectionAggregator,
)
from src.gallery_service.app.services.domain import AuthenticatedUser
from src.gallery_service.app.services.file_storage import FileStorageService
from src.gallery_service.app.services.image_management import (
    ImageManagementService,
)
from src.gallery_service.app.services.like_toggle import LikeToggleService

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture(autouse=True)
async def setup_tortoise():
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": MODEL_MODULES},
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def temp_storage_dir():
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def test_settings(temp_storage_dir):
    return Settings(
        UPLOADS_DIR=str(Path(temp_storage_dir) / "uploads"),
        TEMP_DIR=str(Path(temp_storage_dir) / "uploads" / "tmp"),
        LOG_FILE=str(Path(temp_storage_dir) / "logs" / "gallery.log"),
        JWT_SECRET_KEY="test-secret-key",
        GEMINI_API_KEY=None,
        AUTO_CAPTION_ON_UPLOAD=False,
    )


@pytest.fixture
def test_container(test_settings):
    """Create a fresh service container for each test."""
    container = ServiceContainer(settings=test_settings)
    override_container_for_testing(container)
    yield container
    restore_container()


@pytest.fixture
def file_storage(test_settings):
    return FileStorageService(settings=test_settings)


@pytest.fixture
def image_management(file_storage, test_settings):
    return ImageManagementService(file_storage=file_storage, settings=test_settings)


@pytest.fixture
def like_toggle():
    return LikeToggleService()


@pytest.fixture
def aggregator():
    return CollectionAggregator()


@pytest.fixture
def auth_service(test_settings):
    return AuthService(settings=test_settings)


@pytest.fixture
def make_user():
    async def _make_user(username: str | None = None) -> User:
        username = username or f"user_{uuid4().hex[:8]}"
        return await User.create(
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
        )

    return _make_user


@pytest.fixture
def make_image():
    """Create Image rows with controlled creation times (minutes after BASE_TIME)."""

    async def _make_image(owner: User, minute: int = 0, likes_count: int = 0):
        filename = f"{uuid4().hex}-photo.jpg"
        return await ImageModel.create(
            filename=filename,
            original_filename="photo.jpg",
            filepath=f"/uploads/{filename}",
            uploaded_by=owner,
            likes_count=likes_count,
            created_at=BASE_TIME + timedelta(minutes=minute),
        )

    return _make_image


@pytest.fixture
def make_like():
    async def _make_like(user: User, image: ImageModel, minute: int = 0) -> Like:
        return await Like.create(
            user=user,
            image=image,
            created_at=BASE_TIME + timedelta(hours=1, minutes=minute),
        )

    return _make_like


@pytest.fixture
def sample_image_bytes():
    image = Image.new("RGB", (50, 50), color="blue")
    img_bytes = io.BytesIO()
    image.save(img_bytes, format="JPEG")
    return img_bytes.getvalue()


@pytest.fixture
def sample_png_bytes():
    image = Image.new("RGBA", (20, 20), color=(255, 0, 0, 128))
    img_bytes = io.BytesIO()
    image.save(img_bytes, format="PNG")
    return img_bytes.getvalue()


@pytest.fixture
def current_user():
    return AuthenticatedUser(id=uuid4(), username="alice", email="alice@example.com")


@pytest.fixture
def mock_image_record(current_user):
    record = Mock(spec=ImageModel)
    record.id = uuid4()
    record.filename = "1700000000000-42-photo.jpg"
    record.original_filename = "photo.jpg"
    record.filepath = "/uploads/1700000000000-42-photo.jpg"
    record.uploaded_by_id = current_user.id
    record.description = ""
    record.is_public = False
    record.likes_count = 0
    record.created_at = BASE_TIME
    return record


@pytest.fixture
def mock_aggregator():
    mock = Mock(spec=CollectionAggregator)
    mock.get_collection = AsyncMock()
    return mock


@pytest.fixture
def mock_like_toggle():
    mock = Mock(spec=LikeToggleService)
    mock.toggle_like = AsyncMock()
    mock.reconcile_likes_count = AsyncMock(return_value=0)
    return mock


@pytest.fixture
def mock_image_management():
    mock = Mock(spec=ImageManagementService)
    mock.upload_image = AsyncMock()
    mock.delete_image = AsyncMock()
    mock.remove_stored_file = AsyncMock(return_value=None)
    mock.get_total_likes = AsyncMock(return_value=0)
    return mock


@pytest.fixture
def mock_caption_service():
    mock = Mock(spec=CaptionGenerationService)
    mock.generate_caption = AsyncMock(return_value="A blue square.")
    mock.is_configured = True
    mock.cleanup = AsyncMock()
    return mock


@pytest.fixture
def mock_auth_service():
    mock = Mock(spec=AuthService)
    mock.signup = AsyncMock()
    mock.login = AsyncMock()
    mock.is_username_available = AsyncMock(return_value=True)
    mock.authenticate_token = AsyncMock()
    return mock


def build_test_app(authenticated_user: AuthenticatedUser | None = None) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/api")
    app.include_router(images.router, prefix="/api")
    app.include_router(ai.router, prefix="/api")
    app.include_router(internal.router, prefix="/internal")

    if authenticated_user is not None:
        app.dependency_overrides[get_current_user] = lambda: authenticated_user

    return app


@pytest.fixture
def test_client(test_container, current_user):
    """Client whose requests are authenticated as ``current_user``."""
    return TestClient(build_test_app(current_user))


@pytest.fixture
def anonymous_client(test_container):
    return TestClient(build_test_app())


@pytest.fixture
async def anonymous_async_client(test_container):
    """Async client sharing the test event loop, for routes that hit the DB."""
    transport = httpx.ASGITransport(app=build_test_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
