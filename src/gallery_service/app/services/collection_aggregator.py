from typing import Iterable
from uuid import UUID

from loguru import logger

from ..core.exceptions import CollectionRetrievalError
from ..models import Image as ImageModel
from ..models import Like
from .domain import CollectionPage, CollectionView, ImageWithLikeStatus, PageRequest


def merge_collection(
    uploads: Iterable[ImageModel],
    liked_images: Iterable[ImageModel],
    liked_ids: set,
    page_request: PageRequest,
) -> CollectionPage:
    """Union uploads and liked images into one newest-first page.

    An image that is both uploaded and liked by the requester appears once.
    Sorting is by image creation time and is stable, so equal timestamps keep
    the order in which the records were supplied. Pagination is applied to the
    merged list, never to the inputs.
    """
    unique: dict[str, ImageModel] = {}
    for image in [*uploads, *liked_images]:
        unique.setdefault(str(image.id), image)

    ordered = sorted(unique.values(), key=lambda img: img.created_at, reverse=True)

    total = len(ordered)
    window = ordered[page_request.offset : page_request.offset + page_request.limit]

    return CollectionPage(
        images=[
            ImageWithLikeStatus(image=img, is_liked=str(img.id) in liked_ids)
            for img in window
        ],
        total=total,
        page=page_request.page,
        pages=page_request.pages_for(total),
    )


class CollectionAggregator:
    """Read-only assembly of a user's upload, liked and combined views."""

    async def get_collection(
        self,
        user_id: UUID,
        view: CollectionView,
        page_request: PageRequest,
    ) -> CollectionPage:
        logger.info(
            f"Fetching {view.value} collection for user {user_id} "
            f"(page={page_request.page}, limit={page_request.limit})"
        )

        try:
            if view == CollectionView.UPLOADS:
                return await self._get_uploads(user_id, page_request)
            if view == CollectionView.LIKED:
                return await self._get_liked(user_id, page_request)
            return await self._get_all(user_id, page_request)

        except Exception as e:
            logger.error(f"Error fetching {view.value} collection for user {user_id}: {e}")
            raise CollectionRetrievalError(_retrieval_message(view)) from e

    async def _liked_image_ids(self, user_id: UUID, image_ids=None) -> set[str]:
        query = Like.filter(user_id=user_id)
        if image_ids is not None:
            query = query.filter(image_id__in=image_ids)
        ids = await query.values_list("image_id", flat=True)
        return {str(image_id) for image_id in ids}

    async def _get_uploads(
        self, user_id: UUID, page_request: PageRequest
    ) -> CollectionPage:
        total = await ImageModel.filter(uploaded_by_id=user_id).count()

        images = (
            await ImageModel.filter(uploaded_by_id=user_id)
            .order_by("-created_at", "-id")
            .offset(page_request.offset)
            .limit(page_request.limit)
        )

        liked_ids = await self._liked_image_ids(user_id, [img.id for img in images])

        return CollectionPage(
            images=[
                ImageWithLikeStatus(image=img, is_liked=str(img.id) in liked_ids)
                for img in images
            ],
            total=total,
            page=page_request.page,
            pages=page_request.pages_for(total),
        )

    async def _get_liked(
        self, user_id: UUID, page_request: PageRequest
    ) -> CollectionPage:
        total = await Like.filter(user_id=user_id).count()

        likes = (
            await Like.filter(user_id=user_id)
            .order_by("-created_at", "-id")
            .offset(page_request.offset)
            .limit(page_request.limit)
            .select_related("image")
        )

        return CollectionPage(
            images=[
                ImageWithLikeStatus(image=like.image, is_liked=True)
                for like in likes
                if like.image is not None
            ],
            total=total,
            page=page_request.page,
            pages=page_request.pages_for(total),
        )

    async def _get_all(self, user_id: UUID, page_request: PageRequest) -> CollectionPage:
        uploads = await ImageModel.filter(uploaded_by_id=user_id).order_by(
            "-created_at", "-id"
        )

        liked_ids = await self._liked_image_ids(user_id)
        liked_images = []
        if liked_ids:
            liked_images = await ImageModel.filter(id__in=list(liked_ids)).order_by(
                "-created_at", "-id"
            )

        return merge_collection(uploads, liked_images, liked_ids, page_request)


def _retrieval_message(view: CollectionView) -> str:
    if view == CollectionView.UPLOADS:
        return "An error occurred while fetching images"
    if view == CollectionView.LIKED:
        return "An error occurred while fetching liked images"
    return "An error occurred while fetching collection"
