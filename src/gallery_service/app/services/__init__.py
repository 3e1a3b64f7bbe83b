from .auth import AuthService
from .caption_generation import CaptionGenerationService
from .collection_aggregator import CollectionAggregator
from .file_storage import FileStorageService
from .image_management import ImageManagementService
from .like_toggle import LikeToggleService

__all__ = [
    "AuthService",
    "CaptionGenerationService",
    "CollectionAggregator",
    "FileStorageService",
    "ImageManagementService",
    "LikeToggleService",
]
