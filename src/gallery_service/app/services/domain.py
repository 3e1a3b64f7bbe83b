import math
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from ..models import Image


class CollectionView(str, Enum):
    """Which slice of a user's images a collection request asks for."""

    ALL = "all"
    UPLOADS = "uploads"
    LIKED = "liked"


@dataclass
class AuthenticatedUser:
    id: UUID
    username: str
    email: str


@dataclass
class PageRequest:
    page: int = 1
    limit: int = 20

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.limit < 1:
            raise ValueError("limit must be >= 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def pages_for(self, total: int) -> int:
        return math.ceil(total / self.limit)


@dataclass
class ImageWithLikeStatus:
    image: Image
    is_liked: bool


@dataclass
class CollectionPage:
    images: list[ImageWithLikeStatus]
    total: int
    page: int
    pages: int


@dataclass
class LikeToggleResult:
    is_liked: bool
    likes_count: int


@dataclass
class StoredUpload:
    filename: str
    original_filename: str
    filepath: str
    mime_type: str
    file_size: int
    metadata: dict = field(default_factory=dict)


@dataclass
class UploadRequest:
    file_data: bytes
    original_filename: str
    content_type: str | None = None
    description: str = ""
    is_public: bool = False

    @property
    def file_size_bytes(self) -> int:
        return len(self.file_data)
