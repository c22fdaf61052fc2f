"""
Accommodation Service - host listings with archive-style soft deletion
"""
from typing import List, Optional

from tripdb.models.accommodation import Accommodation, ListingStatus
from tripdb.models.trip import Ratings
from tripdb.services.base import EntityService


class AccommodationService(EntityService[Accommodation]):
    collection = "accommodations"
    model = Accommodation
    search_fields = ["title", "description", "type", "category"]

    async def find_all(
        self,
        limit: Optional[int] = None,
        prefix: str = "",
        include_archived: bool = False,
    ) -> List[Accommodation]:
        listings = await super().find_all(limit=limit, prefix=prefix)
        if include_archived:
            return listings
        return [a for a in listings if a.is_listed]

    async def find_by_host(self, host_id: str, status: Optional[str] = None) -> List[Accommodation]:
        listings = [a for a in await self.find_by("hostId", host_id) if a.is_listed]
        if status:
            listings = [a for a in listings if a.status == status]
        return listings

    async def find_featured(self, limit: int = 10) -> List[Accommodation]:
        listings = await self.find_all()
        featured = [
            a for a in listings
            if a.featured and a.status == ListingStatus.ACTIVE.value
        ]
        return featured[:limit]

    async def search(self, term: str) -> List[Accommodation]:
        return [a for a in await super().search(term) if a.is_listed]

    async def delete(self, accommodation: Accommodation) -> Accommodation:
        """Soft delete: archive the listing"""
        accommodation.status = ListingStatus.ARCHIVED.value
        return await self.save(accommodation)

    async def hard_delete(self, accommodation: Accommodation) -> Accommodation:
        return await super().delete(accommodation)

    async def update_rating(self, accommodation: Accommodation, rating: float) -> Ratings:
        await self.mutate(accommodation, lambda a: a.rating.add(rating))
        return accommodation.rating
