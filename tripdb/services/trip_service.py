"""
Trip Service - listings, soft deletion and rating aggregation
"""
from typing import Dict, List, Optional

from tripdb.models.trip import Ratings, Trip
from tripdb.services.base import EntityService

SEARCH_FIELDS = ["title", "description", "category"]


class TripService(EntityService[Trip]):
    """Manages trips. Soft-deleted trips are hidden from every listing by default."""

    collection = "trips"
    model = Trip
    search_fields = SEARCH_FIELDS

    async def find_all(
        self,
        limit: Optional[int] = None,
        prefix: str = "",
        include_inactive: bool = False,
    ) -> List[Trip]:
        trips = await super().find_all(limit=limit, prefix=prefix)
        if include_inactive:
            return trips
        return [trip for trip in trips if trip.is_active]

    async def find_featured(self, limit: int = 6) -> List[Trip]:
        trips = await self.find_all()
        return [trip for trip in trips if trip.is_featured][:limit]

    async def find_by_category(self, category: str, limit: Optional[int] = None) -> List[Trip]:
        trips = await self.find_by("category", category, limit=limit)
        return [trip for trip in trips if trip.is_active]

    async def find_by_location(self, location: str, limit: Optional[int] = None) -> List[Trip]:
        """Active trips whose country, city or region contains ``location``"""
        trips = await self.find_all(limit=limit)
        return [trip for trip in trips if trip.matches_location(location)]

    async def search(
        self,
        term: str,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        difficulty: Optional[str] = None,
        duration: Optional[str] = None,
    ) -> List[Trip]:
        """
        Text search over title, description and category, then optional filters

        Args:
            term: Case-insensitive substring; empty matches every trip
            category, difficulty, duration: Exact matches
            min_price, max_price: Inclusive price bounds

        Returns:
            Matching active trips
        """
        trips = await super().search(term)

        if category:
            trips = [t for t in trips if t.category == category]
        if min_price is not None:
            trips = [t for t in trips if t.price >= min_price]
        if max_price is not None:
            trips = [t for t in trips if t.price <= max_price]
        if difficulty:
            trips = [t for t in trips if t.difficulty == difficulty]
        if duration:
            trips = [t for t in trips if t.duration == duration]

        return [t for t in trips if t.is_active]

    async def delete(self, trip: Trip) -> Trip:
        """Soft delete: keep the document, mark it inactive"""
        trip.is_active = False
        return await self.save(trip)

    async def hard_delete(self, trip: Trip) -> Trip:
        return await super().delete(trip)

    async def update_rating(self, trip: Trip, rating: float) -> Ratings:
        """Fold one rating into the running average, retrying on concurrent writers"""
        def add_rating(current: Trip) -> None:
            current.ratings.add(rating)

        await self.mutate(trip, add_rating)
        return trip.ratings

    async def set_availability(self, trip: Trip, dates: Dict[str, int]) -> Dict[str, int]:
        trip.availability = {**trip.availability, **dates}
        await self.save(trip)
        return trip.availability

    async def add_image(self, trip: Trip, image_url: str) -> List[str]:
        if image_url not in trip.images:
            trip.images.append(image_url)
            await self.save(trip)
        return trip.images

    async def remove_image(self, trip: Trip, image_url: str) -> List[str]:
        trip.images = [img for img in trip.images if img != image_url]
        await self.save(trip)
        return trip.images
