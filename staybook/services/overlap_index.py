"""Overlap index: is an accommodation already occupied for a date range?"""

import logging
from collections.abc import Sequence
from datetime import date
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from staybook.domain.overlap import validate_stay_range
from staybook.models.reservation import Reservation
from staybook.repositories.reservation_repository import ReservationRepository

logger = logging.getLogger(__name__)


class OverlapIndex:
    """Answers occupancy questions against active (pending or confirmed)
    reservations only. Read-only; runs inside the caller's transaction."""

    async def find_conflicts(
        self,
        db: AsyncSession,
        accommodation_id: UUID,
        start_date: date,
        end_date: date,
        exclude_reservation_id: UUID | None = None,
    ) -> Sequence[Reservation]:
        validate_stay_range(start_date, end_date)
        return await ReservationRepository(db).find_by_accommodation_active(
            accommodation_id,
            start_date=start_date,
            end_date=end_date,
            exclude_reservation_id=exclude_reservation_id,
        )

    async def has_conflict(
        self,
        db: AsyncSession,
        accommodation_id: UUID,
        start_date: date,
        end_date: date,
        exclude_reservation_id: UUID | None = None,
    ) -> bool:
        conflicts = await self.find_conflicts(
            db, accommodation_id, start_date, end_date, exclude_reservation_id
        )
        if conflicts:
            logger.warning(
                f"Date conflict on accommodation {accommodation_id} for "
                f"{start_date.isoformat()}..{end_date.isoformat()}: "
                f"overlaps reservation {conflicts[0].id}"
            )
            return True
        return False


# Singleton instance
overlap_index = OverlapIndex()
