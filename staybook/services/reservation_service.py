"""Reservation lifecycle: create, update, transition, delete and query.

Every operation receives the acting ``Principal`` explicitly. Writes that
touch an accommodation's calendar run under that accommodation's lock in a
single transaction, so the overlap check and the write are atomic with
respect to other writers on the same accommodation.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, date, datetime, time
from typing import TypeVar
from uuid import UUID

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from staybook.config import settings
from staybook.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from staybook.core.locks import AccommodationLockRegistry, acquire_store_lock
from staybook.core.permissions import Actor, Principal, can_act_for_guest, classify_actor
from staybook.domain.overlap import validate_guest_count, validate_stay_range
from staybook.domain.reservation_state import (
    ReservationState,
    assert_reservation_transition,
    parse_state,
)
from staybook.models.reservation import Reservation
from staybook.repositories.reservation_repository import ReservationRepository
from staybook.services.accommodation_lookup import AccommodationLookup, accommodation_lookup
from staybook.services.identity_service import IdentityProvider, identity_provider
from staybook.services.overlap_index import OverlapIndex, overlap_index

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected, exclusion_violation
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01", "23P01"})


def is_serialization_failure(exc: DBAPIError) -> bool:
    """True for store aborts caused by concurrent writers."""
    orig = getattr(exc, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None)):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code in RETRYABLE_SQLSTATES:
            return True
    return False


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ReservationService:
    """Reservation lifecycle manager."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        identity: IdentityProvider = identity_provider,
        accommodations: AccommodationLookup = accommodation_lookup,
        overlaps: OverlapIndex = overlap_index,
        locks: AccommodationLockRegistry | None = None,
        clock: Callable[[], datetime] = _utcnow,
        notice_hours: int | None = None,
        retry_attempts: int | None = None,
    ):
        self.session_factory = session_factory
        self.identity = identity
        self.accommodations = accommodations
        self.overlaps = overlaps
        self.locks = locks or AccommodationLockRegistry()
        self.clock = clock
        self.notice_hours = (
            notice_hours if notice_hours is not None else settings.cancellation_notice_hours
        )
        self.retry_attempts = (
            retry_attempts if retry_attempts is not None else settings.serialization_retry_attempts
        )

    # ==================== WRITES ====================

    async def create(
        self,
        principal: Principal,
        accommodation_id: UUID,
        guest_id: UUID,
        start_date: date,
        end_date: date,
        guest_count: int,
    ) -> Reservation:
        """Book ``[start_date, end_date)`` for a guest; the result is pending."""
        validate_stay_range(start_date, end_date)
        validate_guest_count(guest_count)
        if not can_act_for_guest(principal, guest_id):
            raise ForbiddenError("Cannot create reservations on behalf of another guest")

        async def attempt(db: AsyncSession) -> Reservation:
            accommodation = await self.accommodations.get(db, accommodation_id)
            await self.identity.get_active_user(db, guest_id)
            if accommodation.host_id == guest_id:
                raise ValidationError("You cannot book your own accommodation")
            accommodation.ensure_capacity(guest_count)

            if await self.overlaps.has_conflict(db, accommodation_id, start_date, end_date):
                raise ConflictError("dates unavailable")

            reservation = Reservation(
                accommodation_id=accommodation_id,
                guest_id=guest_id,
                start_date=start_date,
                end_date=end_date,
                guest_count=guest_count,
                state=ReservationState.PENDING.value,
            )
            return await ReservationRepository(db).insert(reservation)

        reservation = await self._serialized(accommodation_id, attempt)
        logger.info(
            f"Reservation {reservation.id} created for guest {guest_id} on accommodation "
            f"{accommodation_id} ({start_date.isoformat()}..{end_date.isoformat()}) by {principal.id}"
        )
        return reservation

    async def update(
        self,
        principal: Principal,
        reservation_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        guest_count: int | None = None,
    ) -> Reservation:
        """Change dates and/or guest count of a pending reservation."""
        if guest_count is not None:
            validate_guest_count(guest_count)
        accommodation_id = await self._accommodation_of(reservation_id)

        async def attempt(db: AsyncSession) -> Reservation:
            repository = ReservationRepository(db)
            reservation = await self._load(repository, reservation_id)

            state = parse_state(reservation.state)
            if state != ReservationState.PENDING:
                raise InvalidStateError(f"Cannot modify a {state.value} reservation")
            if not can_act_for_guest(principal, reservation.guest_id):
                raise ForbiddenError("You don't have permission to modify this reservation")

            new_start = start_date if start_date is not None else reservation.start_date
            new_end = end_date if end_date is not None else reservation.end_date
            new_count = guest_count if guest_count is not None else reservation.guest_count
            validate_stay_range(new_start, new_end)
            validate_guest_count(new_count)

            accommodation = await self.accommodations.get(db, reservation.accommodation_id)
            accommodation.ensure_capacity(new_count)

            if await self.overlaps.has_conflict(
                db,
                reservation.accommodation_id,
                new_start,
                new_end,
                exclude_reservation_id=reservation.id,
            ):
                raise ConflictError("dates unavailable")

            reservation.start_date = new_start
            reservation.end_date = new_end
            reservation.guest_count = new_count
            return await repository.update(reservation)

        reservation = await self._serialized(accommodation_id, attempt)
        logger.info(f"Reservation {reservation_id} updated by {principal.id}")
        return reservation

    async def change_state(
        self,
        principal: Principal,
        reservation_id: UUID,
        target_state: str | ReservationState,
        reason: str | None = None,
    ) -> Reservation:
        """Move a reservation along the transition table on behalf of ``principal``."""
        target = parse_state(target_state)
        accommodation_id = await self._accommodation_of(reservation_id)

        async def attempt(db: AsyncSession) -> Reservation:
            repository = ReservationRepository(db)
            reservation = await self._load(repository, reservation_id)
            accommodation = await self.accommodations.get(
                db, reservation.accommodation_id, include_deleted=True
            )
            actor = classify_actor(principal, reservation.guest_id, accommodation.host_id)
            return await self._transition(repository, reservation, target, actor, reason)

        return await self._serialized(accommodation_id, attempt)

    async def cancel_by_guest(self, principal: Principal, reservation_id: UUID) -> Reservation:
        """Guest-initiated cancellation.

        Only the owning guest may use this path, and the cancellation window
        applies to confirmed stays whatever the caller's role.
        """
        accommodation_id = await self._accommodation_of(reservation_id)

        async def attempt(db: AsyncSession) -> Reservation:
            repository = ReservationRepository(db)
            reservation = await self._load(repository, reservation_id)
            if principal.id != reservation.guest_id:
                raise ForbiddenError("You can only cancel your own reservations")
            return await self._transition(
                repository, reservation, ReservationState.CANCELLED, Actor.GUEST_OWNER, None
            )

        return await self._serialized(accommodation_id, attempt)

    async def delete(self, principal: Principal, reservation_id: UUID) -> None:
        """Administrator-only hard delete for data correction."""
        if not principal.is_admin:
            raise ForbiddenError("insufficient permissions")
        accommodation_id = await self._accommodation_of(reservation_id)

        async def attempt(db: AsyncSession) -> None:
            if not await ReservationRepository(db).delete(reservation_id):
                raise NotFoundError("Reservation", str(reservation_id))

        await self._serialized(accommodation_id, attempt)
        logger.warning(f"Reservation {reservation_id} hard-deleted by administrator {principal.id}")

    async def complete_finished_stays(self, today: date | None = None) -> int:
        """Move confirmed reservations whose stay has ended to completed.

        Runs as the system actor; callers are scheduled jobs, never HTTP
        requests. Returns the number of reservations completed.
        """
        now = self.clock() if today is None else datetime.combine(today, time.min, tzinfo=UTC)
        async with self.session_factory() as db:
            due = await ReservationRepository(db).find_due_for_completion(now.date())
            targets = [(r.id, r.accommodation_id) for r in due]

        completed = 0
        for reservation_id, accommodation_id in targets:

            async def attempt(db: AsyncSession, reservation_id: UUID = reservation_id) -> bool:
                repository = ReservationRepository(db)
                reservation = await repository.find_by_id(reservation_id)
                # Cancelled or deleted since the scan
                if reservation is None or reservation.state != ReservationState.CONFIRMED:
                    return False
                await self._transition(
                    repository, reservation, ReservationState.COMPLETED, Actor.SYSTEM, None, now=now
                )
                return True

            if await self._serialized(accommodation_id, attempt):
                completed += 1

        logger.info(f"Completed {completed} finished stays up to {now.date().isoformat()}")
        return completed

    # ==================== QUERIES ====================

    async def find_by_id(self, reservation_id: UUID) -> Reservation | None:
        async with self.session_factory() as db:
            return await ReservationRepository(db).find_by_id(reservation_id)

    async def get(self, reservation_id: UUID) -> Reservation:
        """Like ``find_by_id`` but raising ``NotFoundError``."""
        reservation = await self.find_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation", str(reservation_id))
        return reservation

    async def find_by_guest(
        self, guest_id: UUID, state: ReservationState | None = None
    ) -> Sequence[Reservation]:
        async with self.session_factory() as db:
            return await ReservationRepository(db).find_by_guest(guest_id, state)

    async def find_by_accommodation(
        self, accommodation_id: UUID, state: ReservationState | None = None
    ) -> Sequence[Reservation]:
        async with self.session_factory() as db:
            return await ReservationRepository(db).find_by_accommodation(accommodation_id, state)

    async def find_all(self, state: ReservationState | None = None) -> Sequence[Reservation]:
        async with self.session_factory() as db:
            return await ReservationRepository(db).find_all(state)

    # ==================== INTERNALS ====================

    async def _transition(
        self,
        repository: ReservationRepository,
        reservation: Reservation,
        target: ReservationState,
        actor: Actor,
        reason: str | None,
        now: datetime | None = None,
    ) -> Reservation:
        now = now or self.clock()
        previous = reservation.state
        assert_reservation_transition(
            previous,
            target,
            actor,
            reason=reason,
            start_date=reservation.start_date,
            end_date=reservation.end_date,
            now=now,
            notice_hours=self.notice_hours,
        )

        reservation.state = target.value
        if target == ReservationState.CONFIRMED:
            reservation.confirmed_at = now
        elif target == ReservationState.REJECTED:
            reservation.rejected_at = now
            reservation.rejection_reason = reason.strip()
        elif target == ReservationState.CANCELLED:
            reservation.cancelled_at = now
            reservation.cancelled_by = "admin" if actor == Actor.ADMIN else "guest"
        elif target == ReservationState.COMPLETED:
            reservation.completed_at = now

        await repository.update(reservation)
        logger.info(f"Reservation {reservation.id}: {previous} -> {target.value} by {actor.value}")
        return reservation

    async def _load(self, repository: ReservationRepository, reservation_id: UUID) -> Reservation:
        reservation = await repository.find_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation", str(reservation_id))
        return reservation

    async def _accommodation_of(self, reservation_id: UUID) -> UUID:
        """Lock key for a reservation; the accommodation never changes."""
        reservation = await self.get(reservation_id)
        return reservation.accommodation_id

    async def _serialized(
        self,
        accommodation_id: UUID,
        operation: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """Run ``operation`` in one transaction under the accommodation lock.

        Store-level serialization aborts are retried with a fresh transaction
        (and therefore a fresh overlap check) up to ``retry_attempts`` times,
        then reported as a conflict.
        """
        attempts = 0
        while True:
            try:
                async with self.locks.hold(accommodation_id):
                    async with self.session_factory() as db:
                        async with db.begin():
                            await acquire_store_lock(db, accommodation_id)
                            return await operation(db)
            except DBAPIError as exc:
                if not is_serialization_failure(exc):
                    raise
                if attempts >= self.retry_attempts:
                    logger.warning(
                        f"Serialization failure on accommodation {accommodation_id} "
                        f"after {attempts + 1} attempts: {exc.orig}"
                    )
                    raise ConflictError("dates unavailable") from exc
                attempts += 1
                logger.info(f"Retrying write on accommodation {accommodation_id} after serialization failure")
