"""API dependencies for authentication and service wiring."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.core.permissions import Principal
from staybook.database import async_session_factory, get_db
from staybook.services.identity_service import identity_provider
from staybook.services.reservation_service import ReservationService

# Security scheme
security = HTTPBearer()


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Principal:
    """Resolve the bearer token to the acting principal."""
    return await identity_provider.resolve(db, credentials.credentials)


@lru_cache
def get_reservation_service() -> ReservationService:
    """Process-wide service; its lock registry must be shared by all requests."""
    return ReservationService(async_session_factory)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
Reservations = Annotated[ReservationService, Depends(get_reservation_service)]
