"""SQLAlchemy persistence for reservations.

The repository never commits; the caller owns the transaction so that the
overlap check and the write land in the same unit of work.
"""

from collections.abc import Sequence
from datetime import date
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.domain.overlap import ACTIVE_STATE_VALUES
from staybook.domain.reservation_state import ReservationState
from staybook.models.reservation import Reservation


class ReservationRepository:
    """Reservation persistence bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, reservation: Reservation) -> Reservation:
        self.session.add(reservation)
        await self.session.flush()
        return reservation

    async def update(self, reservation: Reservation) -> Reservation:
        """Flush pending changes on an attached reservation."""
        await self.session.flush()
        return reservation

    async def delete(self, reservation_id: UUID) -> bool:
        result = await self.session.execute(
            delete(Reservation).where(Reservation.id == reservation_id)
        )
        return result.rowcount > 0

    async def find_by_id(self, reservation_id: UUID) -> Reservation | None:
        result = await self.session.execute(
            select(Reservation).where(Reservation.id == reservation_id)
        )
        return result.scalar_one_or_none()

    async def find_by_accommodation_active(
        self,
        accommodation_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        exclude_reservation_id: UUID | None = None,
    ) -> Sequence[Reservation]:
        """Active reservations of an accommodation, optionally only those
        overlapping ``[start_date, end_date)``."""
        query = select(Reservation).where(
            Reservation.accommodation_id == accommodation_id,
            Reservation.state.in_(ACTIVE_STATE_VALUES),
        )
        if start_date is not None and end_date is not None:
            # existing start < new end AND new start < existing end
            query = query.where(
                Reservation.start_date < end_date,
                Reservation.end_date > start_date,
            )
        if exclude_reservation_id is not None:
            query = query.where(Reservation.id != exclude_reservation_id)
        result = await self.session.execute(query.order_by(Reservation.start_date))
        return result.scalars().all()

    async def find_by_guest(
        self, guest_id: UUID, state: ReservationState | None = None
    ) -> Sequence[Reservation]:
        query = select(Reservation).where(Reservation.guest_id == guest_id)
        return await self._listing(query, state)

    async def find_by_accommodation(
        self, accommodation_id: UUID, state: ReservationState | None = None
    ) -> Sequence[Reservation]:
        query = select(Reservation).where(Reservation.accommodation_id == accommodation_id)
        return await self._listing(query, state)

    async def find_all(self, state: ReservationState | None = None) -> Sequence[Reservation]:
        return await self._listing(select(Reservation), state)

    async def find_due_for_completion(self, today: date) -> Sequence[Reservation]:
        """Confirmed reservations whose stay has passed by ``today``.

        Ranges are half-open, so a stay ending on ``today`` already had its
        last night yesterday and is due.
        """
        result = await self.session.execute(
            select(Reservation)
            .where(
                Reservation.state == ReservationState.CONFIRMED.value,
                Reservation.end_date <= today,
            )
            .order_by(Reservation.end_date, Reservation.created_at)
        )
        return result.scalars().all()

    async def _listing(self, query, state: ReservationState | None) -> Sequence[Reservation]:
        if state is not None:
            query = query.where(Reservation.state == ReservationState(state).value)
        result = await self.session.execute(
            query.order_by(Reservation.start_date, Reservation.created_at)
        )
        return result.scalars().all()
