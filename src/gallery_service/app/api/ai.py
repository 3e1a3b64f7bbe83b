from fastapi import APIRouter, Depends, File, UploadFile
from loguru import logger

from ..core.dependencies import get_caption_service, get_current_user, get_file_storage
from ..core.exceptions import ValidationError
from ..schemas import CaptionResponse
from ..services.caption_generation import CaptionGenerationService
from ..services.domain import AuthenticatedUser
from ..services.file_storage import FileStorageService

router = APIRouter(prefix="/ai")


@router.post("/describe-image", response_model=CaptionResponse)
async def describe_image(
    image: UploadFile | None = File(None),
    current_user: AuthenticatedUser = Depends(get_current_user),
    file_storage: FileStorageService = Depends(get_file_storage),
    caption_service: CaptionGenerationService = Depends(get_caption_service),
):
    """
    Generate a caption for an image without storing it.

    Raises:
        ValidationError: missing file, unsupported type or too large
        UpstreamError: caption model unavailable, failed or timed out
    """
    if image is None or not image.filename:
        raise ValidationError("No image file provided")

    file_data = await image.read(file_storage.settings.MAX_FILE_SIZE + 1)
    file_storage.validate_upload(image.content_type, len(file_data))

    logger.info(f"Generating caption for {image.filename} requested by {current_user.id}")

    description = await caption_service.generate_caption(file_data, image.content_type)

    return CaptionResponse(description=description)
