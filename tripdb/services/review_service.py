"""
Review Service - submission, moderation and rating roll-up
"""
import logging
from typing import Any, List, Mapping, Optional, Union

from tripdb.core.exceptions import InvalidStatusTransitionError, NotFoundError
from tripdb.models.accommodation import Accommodation
from tripdb.models.base import CreateResult
from tripdb.models.review import ModerationStatus, Review, ReviewItemType
from tripdb.models.trip import Trip
from tripdb.services.accommodation_service import AccommodationService
from tripdb.services.base import EntityService
from tripdb.services.trip_service import TripService
from tripdb.store.document_store import DocumentStore

logger = logging.getLogger(__name__)


class ReviewService(EntityService[Review]):
    """
    Reviews enter as pending. Only approval folds the rating into the reviewed
    item's running average, so rejected reviews never touch the aggregate.
    """

    collection = "reviews"
    model = Review
    search_fields = ["title", "content"]

    def __init__(
        self,
        store: DocumentStore,
        trips: TripService,
        accommodations: AccommodationService,
        conflict_retries: int = 3,
    ):
        super().__init__(store, conflict_retries)
        self.trips = trips
        self.accommodations = accommodations

    async def submit(self, data: Union[Review, Mapping[str, Any]]) -> CreateResult[Review]:
        review = self.build(data)
        review.moderation_status = ModerationStatus.PENDING.value
        return await self.create_checked(review)

    async def find_by_item(self, item_id: str, include_unapproved: bool = False) -> List[Review]:
        reviews = await self.find_by("itemId", item_id)
        if include_unapproved:
            return reviews
        return [r for r in reviews if r.moderation_status == ModerationStatus.APPROVED.value]

    async def find_by_user(self, user_id: str) -> List[Review]:
        return await self.find_by("userId", user_id)

    async def find_pending(self, limit: Optional[int] = None) -> List[Review]:
        return await self.find_by("moderationStatus", ModerationStatus.PENDING.value, limit=limit)

    async def approve(self, review: Review) -> Review:
        """Approve a pending review and add its rating to the reviewed item"""
        self._check_pending(review, ModerationStatus.APPROVED)
        item = await self._find_item(review)
        review.moderation_status = ModerationStatus.APPROVED.value
        await self.save(review)
        await self._item_service(review).update_rating(item, review.rating)
        logger.info(
            f"Rating {review.rating} added to {review.item_type} {review.item_id}",
            extra={"collection": self.collection, "document_id": review.id},
        )
        return review

    async def reject(self, review: Review) -> Review:
        self._check_pending(review, ModerationStatus.REJECTED)
        review.moderation_status = ModerationStatus.REJECTED.value
        return await self.save(review)

    async def mark_helpful(self, review: Review) -> Review:
        def vote(r: Review) -> None:
            r.helpful_votes += 1

        return await self.mutate(review, vote)

    def _check_pending(self, review: Review, target: ModerationStatus) -> None:
        if review.moderation_status != ModerationStatus.PENDING.value:
            raise InvalidStatusTransitionError("review", review.moderation_status, target.value)

    def _item_service(self, review: Review) -> Union[TripService, AccommodationService]:
        if review.item_type == ReviewItemType.TRIP.value:
            return self.trips
        return self.accommodations

    async def _find_item(self, review: Review) -> Union[Trip, Accommodation]:
        service = self._item_service(review)
        item = await service.find_by_id(review.item_id)
        if item is None:
            raise NotFoundError(service.collection, review.item_id)
        return item
