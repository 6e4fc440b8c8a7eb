"""Accommodation lookup for the reservation core."""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.core.exceptions import NotFoundError, ValidationError
from staybook.models.accommodation import Accommodation


@dataclass(frozen=True)
class AccommodationInfo:
    """What the reservation core needs to know about a listing."""

    id: UUID
    host_id: UUID
    is_deleted: bool
    capacity: int

    def ensure_capacity(self, guest_count: int) -> None:
        if guest_count > self.capacity:
            raise ValidationError(
                f"Maximum {self.capacity} guests allowed for this accommodation"
            )


class AccommodationLookup:
    """Read-only access to accommodations.

    Soft-deleted accommodations are filtered by the ``include_deleted``
    predicate: booking flows leave it off and see them as missing, while
    state changes on existing reservations turn it on to find the host.
    """

    async def get(
        self,
        db: AsyncSession,
        accommodation_id: UUID,
        include_deleted: bool = False,
    ) -> AccommodationInfo:
        query = select(Accommodation).where(Accommodation.id == accommodation_id)
        if not include_deleted:
            query = query.where(Accommodation.is_deleted.is_(False))
        result = await db.execute(query)
        accommodation = result.scalar_one_or_none()
        if not accommodation:
            raise NotFoundError("Accommodation", str(accommodation_id))

        return AccommodationInfo(
            id=accommodation.id,
            host_id=accommodation.host_id,
            is_deleted=accommodation.is_deleted,
            capacity=accommodation.capacity,
        )

    async def list_owned_by(self, db: AsyncSession, host_id: UUID) -> list[UUID]:
        """Ids of the accommodations a host owns, for host-side visibility filters."""
        result = await db.execute(
            select(Accommodation.id).where(Accommodation.host_id == host_id)
        )
        return list(result.scalars().all())


# Singleton instance
accommodation_lookup = AccommodationLookup()
