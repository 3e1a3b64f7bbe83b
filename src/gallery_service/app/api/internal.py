from uuid import UUID

from fastapi import APIRouter, Depends
from loguru import logger

from ..core.dependencies import get_like_toggle
from ..core.exceptions import GalleryException, InternalError
from ..schemas import LikesCountResponse
from ..services.like_toggle import LikeToggleService

router = APIRouter()


@router.post(
    "/images/{image_id}/reconcile-likes",
    response_model=LikesCountResponse,
)
async def reconcile_likes(
    image_id: UUID,
    like_toggle: LikeToggleService = Depends(get_like_toggle),
):
    """
    Rebuild an image's likes_count from its Like rows.

    Mounted under /internal without authentication. The operation is idempotent
    and only rewrites the counter to the stored like count; restrict /internal
    at the proxy when the service is publicly reachable.
    """
    logger.info(f"Reconciling likes_count for image {image_id}")

    try:
        likes_count = await like_toggle.reconcile_likes_count(image_id)
        return LikesCountResponse(likes_count=likes_count)

    except GalleryException:
        raise
    except Exception as e:
        logger.error(f"Error reconciling likes for image {image_id}: {e}")
        raise InternalError("Internal server error reconciling likes")
