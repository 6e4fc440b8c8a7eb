"""Persistence adapters."""

from staybook.repositories.reservation_repository import ReservationRepository

__all__ = ["ReservationRepository"]
