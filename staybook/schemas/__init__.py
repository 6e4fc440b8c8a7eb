"""Pydantic schemas for request/response validation."""

from staybook.schemas.reservation import (
    ReservationCreate,
    ReservationListResponse,
    ReservationResponse,
    ReservationStateChange,
    ReservationUpdate,
)

__all__ = [
    "ReservationCreate",
    "ReservationListResponse",
    "ReservationResponse",
    "ReservationStateChange",
    "ReservationUpdate",
]
