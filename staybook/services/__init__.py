"""Reservation services and their collaborators."""

from staybook.services.accommodation_lookup import (
    AccommodationInfo,
    AccommodationLookup,
    accommodation_lookup,
)
from staybook.services.identity_service import IdentityProvider, identity_provider
from staybook.services.overlap_index import OverlapIndex, overlap_index
from staybook.services.reservation_service import ReservationService

__all__ = [
    "AccommodationInfo",
    "AccommodationLookup",
    "accommodation_lookup",
    "IdentityProvider",
    "identity_provider",
    "OverlapIndex",
    "overlap_index",
    "ReservationService",
]
