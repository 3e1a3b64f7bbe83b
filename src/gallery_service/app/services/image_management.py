from uuid import UUID

from loguru import logger
from tortoise.transactions import in_transaction

from ..core.config import Settings, get_settings
from ..core.exceptions import (
    GalleryException,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ..models import Image as ImageModel
from ..models import Like
from .caption_generation import CaptionGenerationService
from .domain import UploadRequest
from .file_storage import FileStorageService


class ImageManagementService:
    def __init__(
        self,
        file_storage: FileStorageService | None = None,
        caption_service: CaptionGenerationService | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.file_storage = file_storage or FileStorageService(self.settings)
        self.caption_service = caption_service

    def normalize_description(self, description: str | None) -> str:
        description = (description or "").strip()
        if len(description) > self.settings.DESCRIPTION_MAX_LENGTH:
            raise ValidationError(
                f"Description cannot exceed "
                f"{self.settings.DESCRIPTION_MAX_LENGTH} characters"
            )
        return description

    async def upload_image(self, user_id: UUID, request: UploadRequest) -> ImageModel:
        description = self.normalize_description(request.description)

        stored = await self.file_storage.save_upload(
            request.file_data, request.original_filename, request.content_type
        )

        if not description and self.settings.AUTO_CAPTION_ON_UPLOAD:
            description = await self._try_generate_caption(request)

        try:
            image = await ImageModel.create(
                filename=stored.filename,
                original_filename=stored.original_filename,
                filepath=stored.filepath,
                uploaded_by_id=user_id,
                description=description,
                is_public=request.is_public,
            )
        except Exception:
            await self.file_storage.delete_upload(stored.filename)
            raise

        logger.info(
            f"User {user_id} uploaded image {image.id} "
            f"({stored.original_filename}, {request.file_size_bytes} bytes)"
        )
        return image

    async def _try_generate_caption(self, request: UploadRequest) -> str:
        if self.caption_service is None or not self.caption_service.is_configured:
            return ""

        try:
            caption = await self.caption_service.generate_caption(
                request.file_data, request.content_type
            )
            return caption[: self.settings.DESCRIPTION_MAX_LENGTH]
        except GalleryException as e:
            logger.warning(
                f"Automatic caption failed for {request.original_filename}: {e.message}"
            )
            return ""
        except Exception as e:
            logger.error(
                f"Unexpected caption error for {request.original_filename}: {e}"
            )
            return ""

    async def get_image(self, image_id: UUID) -> ImageModel:
        image = await ImageModel.get_or_none(id=image_id)
        if image is None:
            raise NotFoundError("Image not found")
        return image

    async def delete_image(self, user_id: UUID, image_id: UUID) -> ImageModel:
        """Delete an owned image and every Like that references it.

        Returns the deleted record so the caller can schedule removal of the
        stored file once the response is sent.
        """
        image = await self.get_image(image_id)

        if str(image.uploaded_by_id) != str(user_id):
            logger.warning(
                f"User {user_id} attempted to delete image {image_id} owned by "
                f"{image.uploaded_by_id}"
            )
            raise PermissionDeniedError(
                "You do not have permission to delete this image"
            )

        async with in_transaction():
            removed_likes = await Like.filter(image_id=image_id).delete()
            await ImageModel.filter(id=image_id).delete()

        logger.info(
            f"Deleted image {image_id} for user {user_id} "
            f"({removed_likes} likes removed)"
        )
        return image

    async def remove_stored_file(self, filename: str) -> None:
        """Best-effort file removal; failures are logged, never raised."""
        try:
            await self.file_storage.delete_upload(filename)
        except Exception as e:
            logger.error(f"Error deleting file {filename}: {e}")

    async def get_total_likes(self, user_id: UUID) -> int:
        counts = await ImageModel.filter(uploaded_by_id=user_id).values_list(
            "likes_count", flat=True
        )
        return sum(max(0, count or 0) for count in counts)
