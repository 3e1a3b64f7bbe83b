from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..services.domain import CollectionPage, ImageWithLikeStatus


class ImageOut(BaseModel):
    """Image as returned to clients, annotated with the requester's like status"""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(..., alias="_id", description="Image identifier")
    filename: str = Field(..., description="Stored filename")
    original_filename: str = Field(
        ..., alias="originalname", description="Original filename of uploaded image"
    )
    filepath: str = Field(..., description="Public path of the stored file")
    uploaded_by: UUID = Field(..., alias="uploadedBy", description="Uploader id")
    description: str = Field(default="", description="Caption, at most 500 chars")
    is_public: bool = Field(default=False, alias="isPublic")
    likes_count: int = Field(default=0, alias="likesCount", ge=0)
    created_at: datetime = Field(..., alias="createdAt")
    is_liked: bool = Field(default=False, alias="isLiked")

    @classmethod
    def from_record(cls, entry: ImageWithLikeStatus) -> "ImageOut":
        image = entry.image
        return cls(
            id=image.id,
            filename=image.filename,
            original_filename=image.original_filename,
            filepath=image.filepath,
            uploaded_by=image.uploaded_by_id,
            description=image.description,
            is_public=image.is_public,
            likes_count=max(0, image.likes_count),
            created_at=image.created_at,
            is_liked=entry.is_liked,
        )


class CollectionResponse(BaseModel):
    """Paginated list of images for one collection view"""

    success: bool = Field(default=True)
    images: list[ImageOut] = Field(..., description="Images on the requested page")
    total: int = Field(..., description="Total number of images in the view", ge=0)
    page: int = Field(..., description="Current page number (1-indexed)", ge=1)
    pages: int = Field(..., description="Total number of pages", ge=0)

    @classmethod
    def from_page(cls, collection: CollectionPage) -> "CollectionResponse":
        return cls(
            images=[ImageOut.from_record(entry) for entry in collection.images],
            total=collection.total,
            page=collection.page,
            pages=collection.pages,
        )


class LikeToggleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True)
    message: str = Field(..., description="Image liked / Image unliked")
    is_liked: bool = Field(..., alias="isLiked")
    likes_count: int = Field(..., alias="likesCount", ge=0)


class LikesCountResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True)
    likes_count: int = Field(..., alias="likesCount", ge=0)


class StatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True)
    total_likes: int = Field(
        ..., alias="totalLikes", ge=0, description="Likes across the user's uploads"
    )


class ImageUploadResponse(BaseModel):
    """Response model for successful image upload"""

    success: bool = Field(default=True)
    message: str = Field(default="Image uploaded successfully")
    image: ImageOut


class MessageResponse(BaseModel):
    success: bool = Field(default=True)
    message: str


class CaptionResponse(BaseModel):
    success: bool = Field(default=True)
    description: str = Field(..., description="Generated caption")


class ErrorResponse(BaseModel):
    """Error response model"""

    success: bool = Field(default=False)
    message: str = Field(..., description="Human-readable error message")
    code: str | None = Field(None, description="Error code")
