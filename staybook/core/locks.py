"""Per-accommodation serialization of check-then-write sequences."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class AccommodationLockRegistry:
    """One ``asyncio.Lock`` per accommodation, dropped once nobody waits on it.

    Operations on different accommodations never contend.
    """

    def __init__(self) -> None:
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._holders: dict[UUID, int] = {}

    @asynccontextmanager
    async def hold(self, accommodation_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.setdefault(accommodation_id, asyncio.Lock())
        self._holders[accommodation_id] = self._holders.get(accommodation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[accommodation_id] -= 1
            if self._holders[accommodation_id] == 0:
                del self._holders[accommodation_id]
                del self._locks[accommodation_id]

    def __len__(self) -> int:
        return len(self._locks)


def advisory_key(accommodation_id: UUID) -> int:
    """Signed 64-bit key for ``pg_advisory_xact_lock``."""
    return int.from_bytes(accommodation_id.bytes[:8], "big", signed=True)


async def acquire_store_lock(session: AsyncSession, accommodation_id: UUID) -> None:
    """Take the transaction-scoped store lock for an accommodation.

    Only PostgreSQL has advisory locks; other backends rely on the in-process
    registry alone. The lock is released when the transaction ends.
    """
    if session.get_bind().dialect.name != "postgresql":
        return
    await session.execute(
        text("SELECT pg_advisory_xact_lock(:key)"),
        {"key": advisory_key(accommodation_id)},
    )
    logger.debug(f"Advisory lock taken for accommodation {accommodation_id}")
