from uuid import UUID

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    Query,
    UploadFile,
    status,
)
from loguru import logger

from ..core.config import Settings
from ..core.dependencies import (
    get_collection_aggregator,
    get_current_user,
    get_image_management,
    get_like_toggle,
    get_settings_dependency,
)
from ..core.exceptions import GalleryException, InternalError, ValidationError
from ..schemas import (
    CollectionResponse,
    ImageOut,
    ImageUploadResponse,
    LikeToggleResponse,
    MessageResponse,
    StatsResponse,
)
from ..services.collection_aggregator import CollectionAggregator
from ..services.domain import (
    AuthenticatedUser,
    CollectionView,
    ImageWithLikeStatus,
    PageRequest,
    UploadRequest,
)
from ..services.image_management import ImageManagementService
from ..services.like_toggle import LikeToggleService

router = APIRouter(prefix="/images")

_BOOLEAN_VALUES = {"true": True, "1": True, "false": False, "0": False}


def get_page_request(
    page: int = Query(1, ge=1, description="1-indexed page number"),
    limit: int | None = Query(None, ge=1, description="Page size"),
    settings: Settings = Depends(get_settings_dependency),
) -> PageRequest:
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    return PageRequest(page=page, limit=limit)


def parse_is_public(value: str | None) -> bool:
    if value is None or value == "":
        return False
    parsed = _BOOLEAN_VALUES.get(value.strip().lower())
    if parsed is None:
        raise ValidationError("isPublic must be a boolean")
    return parsed


@router.post(
    "/upload",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_image(
    image: UploadFile | None = File(None),
    description: str | None = Form(None),
    is_public: str | None = Form(None, alias="isPublic"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    image_management: ImageManagementService = Depends(get_image_management),
    settings: Settings = Depends(get_settings_dependency),
):
    """
    Upload an image into the current user's collection.

    Args:
        image: JPEG, PNG, GIF or WebP file, at most 5MB
        description: Optional caption, at most 500 characters
        isPublic: Optional "true"/"false" visibility flag

    Returns:
        ImageUploadResponse with the stored image record
    """
    if image is None or not image.filename:
        raise ValidationError("No file uploaded")

    logger.info(f"Received image upload from {current_user.id}: {image.filename}")

    try:
        upload_request = UploadRequest(
            # One byte past the limit is enough to reject oversized files
            file_data=await image.read(settings.MAX_FILE_SIZE + 1),
            original_filename=image.filename,
            content_type=image.content_type,
            description=description or "",
            is_public=parse_is_public(is_public),
        )

        record = await image_management.upload_image(current_user.id, upload_request)

        return ImageUploadResponse(
            image=ImageOut.from_record(ImageWithLikeStatus(image=record, is_liked=False))
        )

    except GalleryException as e:
        logger.warning(f"Upload rejected for {image.filename}: {e.message}")
        raise
    except IOError as e:
        logger.error(f"File I/O error for {image.filename}: {e}")
        raise InternalError("An error occurred during upload")
    except Exception as e:
        logger.error(f"Unexpected error uploading {image.filename}: {e}")
        raise InternalError("An error occurred during upload")


@router.get("/user", response_model=CollectionResponse)
async def list_user_images(
    page_request: PageRequest = Depends(get_page_request),
    current_user: AuthenticatedUser = Depends(get_current_user),
    aggregator: CollectionAggregator = Depends(get_collection_aggregator),
):
    """Images uploaded by the current user, newest first."""
    collection = await aggregator.get_collection(
        current_user.id, CollectionView.UPLOADS, page_request
    )
    return CollectionResponse.from_page(collection)


@router.get("/liked", response_model=CollectionResponse)
async def list_liked_images(
    page_request: PageRequest = Depends(get_page_request),
    current_user: AuthenticatedUser = Depends(get_current_user),
    aggregator: CollectionAggregator = Depends(get_collection_aggregator),
):
    """Images liked by the current user, most recently liked first."""
    collection = await aggregator.get_collection(
        current_user.id, CollectionView.LIKED, page_request
    )
    return CollectionResponse.from_page(collection)


@router.get("/collection", response_model=CollectionResponse)
async def list_collection(
    page_request: PageRequest = Depends(get_page_request),
    current_user: AuthenticatedUser = Depends(get_current_user),
    aggregator: CollectionAggregator = Depends(get_collection_aggregator),
):
    """Uploads and liked images merged into one de-duplicated feed."""
    collection = await aggregator.get_collection(
        current_user.id, CollectionView.ALL, page_request
    )
    return CollectionResponse.from_page(collection)


@router.get("/stats", response_model=StatsResponse)
async def get_image_stats(
    current_user: AuthenticatedUser = Depends(get_current_user),
    image_management: ImageManagementService = Depends(get_image_management),
):
    """Total likes received across the current user's uploads."""
    try:
        total_likes = await image_management.get_total_likes(current_user.id)
        return StatsResponse(total_likes=total_likes)

    except Exception as e:
        logger.error(f"Error fetching image stats for {current_user.id}: {e}")
        raise InternalError("An error occurred while fetching image stats")


@router.post("/{image_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    image_id: UUID,
    current_user: AuthenticatedUser = Depends(get_current_user),
    like_toggle: LikeToggleService = Depends(get_like_toggle),
):
    """Like the image if not yet liked by the current user, otherwise unlike it."""
    try:
        result = await like_toggle.toggle_like(current_user.id, image_id)

        return LikeToggleResponse(
            message="Image liked" if result.is_liked else "Image unliked",
            is_liked=result.is_liked,
            likes_count=result.likes_count,
        )

    except GalleryException:
        raise
    except Exception as e:
        logger.error(f"Error toggling like on {image_id} for {current_user.id}: {e}")
        raise InternalError("An error occurred while liking the image")


@router.delete("/{image_id}", response_model=MessageResponse)
async def delete_image(
    image_id: UUID,
    background_tasks: BackgroundTasks,
    current_user: AuthenticatedUser = Depends(get_current_user),
    image_management: ImageManagementService = Depends(get_image_management),
):
    """Delete an image owned by the current user together with its likes."""
    try:
        deleted = await image_management.delete_image(current_user.id, image_id)

        background_tasks.add_task(image_management.remove_stored_file, deleted.filename)

        return MessageResponse(message="Image deleted successfully")

    except GalleryException:
        raise
    except Exception as e:
        logger.error(f"Error deleting image {image_id} for {current_user.id}: {e}")
        raise InternalError("An error occurred while deleting the image")
