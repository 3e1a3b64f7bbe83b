from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..services.auth import AuthService
from ..services.caption_generation import CaptionGenerationService
from ..services.collection_aggregator import CollectionAggregator
from ..services.domain import AuthenticatedUser
from ..services.file_storage import FileStorageService
from ..services.image_management import ImageManagementService
from ..services.like_toggle import LikeToggleService
from .config import Settings, get_settings
from .exceptions import AuthenticationError


class ServiceContainer:
    """Lazily builds and caches the services used by the routers."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings
        self._file_storage: FileStorageService | None = None
        self._caption_service: CaptionGenerationService | None = None
        self._image_management: ImageManagementService | None = None
        self._collection_aggregator: CollectionAggregator | None = None
        self._like_toggle: LikeToggleService | None = None
        self._auth_service: AuthService | None = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def file_storage(self) -> FileStorageService:
        if self._file_storage is None:
            self._file_storage = FileStorageService(self.settings)
        return self._file_storage

    @property
    def caption_service(self) -> CaptionGenerationService:
        if self._caption_service is None:
            self._caption_service = CaptionGenerationService(self.settings)
        return self._caption_service

    @property
    def image_management(self) -> ImageManagementService:
        if self._image_management is None:
            self._image_management = ImageManagementService(
                file_storage=self.file_storage,
                caption_service=self.caption_service,
                settings=self.settings,
            )
        return self._image_management

    @property
    def collection_aggregator(self) -> CollectionAggregator:
        if self._collection_aggregator is None:
            self._collection_aggregator = CollectionAggregator()
        return self._collection_aggregator

    @property
    def like_toggle(self) -> LikeToggleService:
        if self._like_toggle is None:
            self._like_toggle = LikeToggleService()
        return self._like_toggle

    @property
    def auth_service(self) -> AuthService:
        if self._auth_service is None:
            self._auth_service = AuthService(self.settings)
        return self._auth_service

    def set_file_storage(self, file_storage: FileStorageService) -> None:
        self._file_storage = file_storage
        self._image_management = None

    def set_caption_service(self, caption_service: CaptionGenerationService) -> None:
        self._caption_service = caption_service
        self._image_management = None

    def set_image_management(self, image_management: ImageManagementService) -> None:
        self._image_management = image_management

    def set_collection_aggregator(self, aggregator: CollectionAggregator) -> None:
        self._collection_aggregator = aggregator

    def set_like_toggle(self, like_toggle: LikeToggleService) -> None:
        self._like_toggle = like_toggle

    def set_auth_service(self, auth_service: AuthService) -> None:
        self._auth_service = auth_service

    async def cleanup(self) -> None:
        if self._caption_service is not None:
            await self._caption_service.cleanup()


_default_container = ServiceContainer()
_container = _default_container


def get_container() -> ServiceContainer:
    return _container


def override_container_for_testing(container: ServiceContainer) -> None:
    global _container
    _container = container


def restore_container() -> None:
    global _container
    _container = _default_container


def get_settings_dependency() -> Settings:
    return get_container().settings


def get_file_storage() -> FileStorageService:
    return get_container().file_storage


def get_caption_service() -> CaptionGenerationService:
    return get_container().caption_service


def get_image_management() -> ImageManagementService:
    return get_container().image_management


def get_collection_aggregator() -> CollectionAggregator:
    return get_container().collection_aggregator


def get_like_toggle() -> LikeToggleService:
    return get_container().like_toggle


def get_auth_service() -> AuthService:
    return get_container().auth_service


security_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token provided")

    return await auth_service.authenticate_token(credentials.credentials)
