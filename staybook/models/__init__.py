"""Database models."""

from staybook.models.accommodation import Accommodation
from staybook.models.reservation import Reservation
from staybook.models.user import User

__all__ = [
    "Accommodation",
    "Reservation",
    "User",
]
