from uuid import UUID

from loguru import logger
from tortoise.exceptions import IntegrityError
from tortoise.expressions import F
from tortoise.transactions import in_transaction

from ..core.exceptions import NotFoundError
from ..models import Image as ImageModel
from ..models import Like
from .domain import LikeToggleResult


class LikeToggleService:
    """Flips a user's like on an image and keeps ``likes_count`` in step.

    The Like row is the source of truth. The counter on the image is only
    ever moved with single-statement ``F`` updates inside the same
    transaction as the Like mutation, and can be rebuilt from the Like rows
    with :meth:`reconcile_likes_count`.
    """

    async def toggle_like(self, user_id: UUID, image_id: UUID) -> LikeToggleResult:
        logger.info(f"Toggling like for user {user_id} on image {image_id}")

        try:
            async with in_transaction():
                if not await ImageModel.filter(id=image_id).exists():
                    raise NotFoundError("Image not found")

                removed = await Like.filter(user_id=user_id, image_id=image_id).delete()

                if removed:
                    # Floored at zero even if the counter had already drifted
                    await ImageModel.filter(id=image_id, likes_count__gt=0).update(
                        likes_count=F("likes_count") - 1
                    )
                    is_liked = False
                else:
                    await Like.create(user_id=user_id, image_id=image_id)
                    await ImageModel.filter(id=image_id).update(
                        likes_count=F("likes_count") + 1
                    )
                    is_liked = True

                likes_count = await self._current_count(image_id)

        except IntegrityError:
            # A concurrent request created the same (user, image) like first
            logger.warning(
                f"Concurrent like detected for user {user_id} on image {image_id}"
            )
            return LikeToggleResult(
                is_liked=True, likes_count=await self._current_count(image_id)
            )

        logger.info(
            f"User {user_id} {'liked' if is_liked else 'unliked'} image {image_id} "
            f"(likes_count={likes_count})"
        )
        return LikeToggleResult(is_liked=is_liked, likes_count=likes_count)

    async def reconcile_likes_count(self, image_id: UUID) -> int:
        """Rewrite the denormalized counter from the Like rows."""
        async with in_transaction():
            if not await ImageModel.filter(id=image_id).exists():
                raise NotFoundError("Image not found")

            actual = await Like.filter(image_id=image_id).count()
            await ImageModel.filter(id=image_id).update(likes_count=actual)

        logger.info(f"Reconciled likes_count for image {image_id} to {actual}")
        return actual

    async def _current_count(self, image_id: UUID) -> int:
        counts = await ImageModel.filter(id=image_id).values_list(
            "likes_count", flat=True
        )
        return max(0, counts[0]) if counts else 0
