"""Reservation-related Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from staybook.domain.reservation_state import ReservationState


class ReservationCreate(BaseModel):
    """Schema for creating a reservation.

    ``guest_id`` defaults to the caller; administrators set it to book on a
    guest's behalf. Date order and guest count are checked by the service so
    that failures carry the typed validation error.
    """

    accommodation_id: UUID
    guest_id: UUID | None = None
    start_date: date
    end_date: date
    guest_count: int = 1


class ReservationUpdate(BaseModel):
    """Schema for modifying a pending reservation; omitted fields are kept."""

    start_date: date | None = None
    end_date: date | None = None
    guest_count: int | None = None


class ReservationStateChange(BaseModel):
    """Schema for moving a reservation to another state."""

    state: ReservationState
    reason: str | None = Field(None, max_length=1000)


class ReservationResponse(BaseModel):
    """Schema for reservation response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    accommodation_id: UUID
    guest_id: UUID

    # Stay
    start_date: date
    end_date: date
    nights: int
    guest_count: int

    # Status
    state: ReservationState
    rejection_reason: str | None
    cancelled_by: str | None

    # Timestamps
    created_at: datetime
    updated_at: datetime
    confirmed_at: datetime | None
    rejected_at: datetime | None
    cancelled_at: datetime | None
    completed_at: datetime | None


class ReservationListResponse(BaseModel):
    """Schema for reservation list."""

    reservations: list[ReservationResponse]
    total: int
