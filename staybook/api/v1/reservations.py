"""Reservation endpoints.

The lifecycle service does no visibility narrowing for reads; the filters
below decide which reservations a caller may see.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import CurrentPrincipal, Reservations
from staybook.core.exceptions import ForbiddenError
from staybook.core.permissions import Actor, Principal, UserRole, classify_actor
from staybook.database import get_db
from staybook.domain.reservation_state import ReservationState
from staybook.models.reservation import Reservation
from staybook.schemas.reservation import (
    ReservationCreate,
    ReservationListResponse,
    ReservationResponse,
    ReservationStateChange,
    ReservationUpdate,
)
from staybook.services.accommodation_lookup import accommodation_lookup

router = APIRouter()


def _listing(reservations) -> ReservationListResponse:
    items = [ReservationResponse.model_validate(r) for r in reservations]
    return ReservationListResponse(reservations=items, total=len(items))


async def _ensure_can_view(db: AsyncSession, principal: Principal, reservation: Reservation) -> None:
    accommodation = await accommodation_lookup.get(
        db, reservation.accommodation_id, include_deleted=True
    )
    if classify_actor(principal, reservation.guest_id, accommodation.host_id) == Actor.STRANGER:
        raise ForbiddenError("You don't have permission to access this reservation")


@router.post("/", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    data: ReservationCreate,
    principal: CurrentPrincipal,
    service: Reservations,
) -> Reservation:
    """Create a pending reservation."""
    return await service.create(
        principal,
        accommodation_id=data.accommodation_id,
        guest_id=data.guest_id or principal.id,
        start_date=data.start_date,
        end_date=data.end_date,
        guest_count=data.guest_count,
    )


@router.get("/", response_model=ReservationListResponse)
async def list_reservations(
    principal: CurrentPrincipal,
    service: Reservations,
    db: Annotated[AsyncSession, Depends(get_db)],
    state: ReservationState | None = Query(default=None),
) -> ReservationListResponse:
    """Reservations visible to the caller: all for admins, their listings'
    for hosts, their own for guests."""
    if principal.role == UserRole.ADMIN:
        return _listing(await service.find_all(state))

    if principal.role == UserRole.HOST:
        reservations = []
        for accommodation_id in await accommodation_lookup.list_owned_by(db, principal.id):
            reservations.extend(await service.find_by_accommodation(accommodation_id, state))
        reservations.sort(key=lambda r: (r.start_date, r.created_at))
        return _listing(reservations)

    return _listing(await service.find_by_guest(principal.id, state))


@router.get("/guest/{guest_id}", response_model=ReservationListResponse)
async def list_guest_reservations(
    guest_id: UUID,
    principal: CurrentPrincipal,
    service: Reservations,
    state: ReservationState | None = Query(default=None),
) -> ReservationListResponse:
    """Reservations held by a guest (the guest themself or an admin)."""
    if not principal.is_admin and principal.id != guest_id:
        raise ForbiddenError("You can only list your own reservations")
    return _listing(await service.find_by_guest(guest_id, state))


@router.get("/accommodation/{accommodation_id}", response_model=ReservationListResponse)
async def list_accommodation_reservations(
    accommodation_id: UUID,
    principal: CurrentPrincipal,
    service: Reservations,
    db: Annotated[AsyncSession, Depends(get_db)],
    state: ReservationState | None = Query(default=None),
) -> ReservationListResponse:
    """Reservations of an accommodation (its host or an admin)."""
    if not principal.is_admin:
        accommodation = await accommodation_lookup.get(db, accommodation_id, include_deleted=True)
        if accommodation.host_id != principal.id:
            raise ForbiddenError("Only the accommodation host can list its reservations")
    return _listing(await service.find_by_accommodation(accommodation_id, state))


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: UUID,
    principal: CurrentPrincipal,
    service: Reservations,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Reservation:
    """Get a reservation by ID."""
    reservation = await service.get(reservation_id)
    await _ensure_can_view(db, principal, reservation)
    return reservation


@router.put("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: UUID,
    data: ReservationUpdate,
    principal: CurrentPrincipal,
    service: Reservations,
) -> Reservation:
    """Modify dates or guest count of a pending reservation."""
    return await service.update(
        principal,
        reservation_id,
        start_date=data.start_date,
        end_date=data.end_date,
        guest_count=data.guest_count,
    )


@router.patch("/{reservation_id}/state", response_model=ReservationResponse)
async def change_reservation_state(
    reservation_id: UUID,
    data: ReservationStateChange,
    principal: CurrentPrincipal,
    service: Reservations,
) -> Reservation:
    """Confirm, reject or cancel a reservation."""
    return await service.change_state(principal, reservation_id, data.state, reason=data.reason)


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: UUID,
    principal: CurrentPrincipal,
    service: Reservations,
) -> Reservation:
    """Cancel one of the caller's own reservations."""
    return await service.cancel_by_guest(principal, reservation_id)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: UUID,
    principal: CurrentPrincipal,
    service: Reservations,
) -> Response:
    """Hard-delete a reservation (admin only)."""
    await service.delete(principal, reservation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
