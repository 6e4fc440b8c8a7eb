"""Tests for reservation persistence"""

from datetime import date
from uuid import uuid4

from staybook.domain.reservation_state import ReservationState
from staybook.models import Reservation
from staybook.repositories import ReservationRepository


def _reservation(accommodation, guest, start, end, state="pending"):
    return Reservation(
        accommodation_id=accommodation.id,
        guest_id=guest.id,
        start_date=start,
        end_date=end,
        guest_count=2,
        state=state,
    )


async def test_insert_and_find(db, accommodation, guest):
    repository = ReservationRepository(db)

    reservation = await repository.insert(
        _reservation(accommodation, guest, date(2025, 6, 1), date(2025, 6, 4))
    )
    await db.commit()

    found = await repository.find_by_id(reservation.id)
    assert found is not None
    assert found.nights == 3
    assert found.state == "pending"
    assert found.created_at is not None
    assert await repository.find_by_id(uuid4()) is None


async def test_insert_does_not_commit(session_factory, accommodation, guest):
    async with session_factory() as session:
        reservation = await ReservationRepository(session).insert(
            _reservation(accommodation, guest, date(2025, 6, 1), date(2025, 6, 4))
        )
        reservation_id = reservation.id
        await session.rollback()

    async with session_factory() as session:
        assert await ReservationRepository(session).find_by_id(reservation_id) is None


async def test_update_flushes_changes(db, accommodation, guest):
    repository = ReservationRepository(db)
    reservation = await repository.insert(
        _reservation(accommodation, guest, date(2025, 6, 1), date(2025, 6, 4))
    )

    reservation.guest_count = 1
    await repository.update(reservation)
    await db.commit()

    assert (await repository.find_by_id(reservation.id)).guest_count == 1


async def test_delete(db, accommodation, guest):
    repository = ReservationRepository(db)
    reservation = await repository.insert(
        _reservation(accommodation, guest, date(2025, 6, 1), date(2025, 6, 4))
    )
    await db.commit()

    assert await repository.delete(reservation.id) is True
    assert await repository.delete(reservation.id) is False


async def test_find_by_accommodation_active(db, accommodation, guest):
    repository = ReservationRepository(db)
    pending = await repository.insert(
        _reservation(accommodation, guest, date(2025, 6, 1), date(2025, 6, 4))
    )
    confirmed = await repository.insert(
        _reservation(accommodation, guest, date(2025, 6, 10), date(2025, 6, 12), "confirmed")
    )
    await repository.insert(
        _reservation(accommodation, guest, date(2025, 6, 2), date(2025, 6, 3), "cancelled")
    )
    await db.commit()

    active = await repository.find_by_accommodation_active(accommodation.id)
    assert [r.id for r in active] == [pending.id, confirmed.id]

    overlapping = await repository.find_by_accommodation_active(
        accommodation.id, date(2025, 6, 3), date(2025, 6, 10)
    )
    assert [r.id for r in overlapping] == [pending.id]

    excluded = await repository.find_by_accommodation_active(
        accommodation.id,
        date(2025, 6, 3),
        date(2025, 6, 10),
        exclude_reservation_id=pending.id,
    )
    assert excluded == []


async def test_listings(db, accommodation, other_accommodation, guest, other_guest):
    repository = ReservationRepository(db)
    second = await repository.insert(
        _reservation(accommodation, guest, date(2025, 7, 1), date(2025, 7, 4), "confirmed")
    )
    first = await repository.insert(
        _reservation(other_accommodation, guest, date(2025, 6, 1), date(2025, 6, 4))
    )
    other = await repository.insert(
        _reservation(accommodation, other_guest, date(2025, 6, 10), date(2025, 6, 12))
    )
    await db.commit()

    assert [r.id for r in await repository.find_by_guest(guest.id)] == [first.id, second.id]
    assert [r.id for r in await repository.find_by_guest(guest.id, ReservationState.CONFIRMED)] == [
        second.id
    ]
    assert [r.id for r in await repository.find_by_accommodation(accommodation.id)] == [
        other.id,
        second.id,
    ]
    assert [r.id for r in await repository.find_all()] == [first.id, other.id, second.id]
    assert [r.id for r in await repository.find_all(ReservationState.PENDING)] == [first.id, other.id]


async def test_find_due_for_completion(db, accommodation, guest):
    repository = ReservationRepository(db)
    ended = await repository.insert(
        _reservation(accommodation, guest, date(2025, 5, 1), date(2025, 5, 4), "confirmed")
    )
    ends_today = await repository.insert(
        _reservation(accommodation, guest, date(2025, 5, 28), date(2025, 6, 1), "confirmed")
    )
    await repository.insert(
        _reservation(accommodation, guest, date(2025, 6, 1), date(2025, 6, 3), "confirmed")
    )
    await repository.insert(
        _reservation(accommodation, guest, date(2025, 5, 10), date(2025, 5, 12), "pending")
    )
    await db.commit()

    due = await repository.find_due_for_completion(date(2025, 6, 1))

    assert [r.id for r in due] == [ended.id, ends_today.id]
