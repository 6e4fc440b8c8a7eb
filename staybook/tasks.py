"""Celery background tasks."""

import asyncio
import logging
from datetime import date

from celery import shared_task
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from staybook.database import create_engine, create_session_factory
from staybook.services.reservation_service import ReservationService

logger = logging.getLogger(__name__)


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


@shared_task(bind=True, max_retries=3)
def complete_finished_stays(self):
    """Mark confirmed reservations whose end date has passed as completed.

    Runs daily at ``settings.completion_job_hour`` UTC.
    """
    try:
        completed = run_async(_complete_finished_stays())
        return {"status": "success", "completed": completed}
    except Exception as exc:
        logger.error(f"Completing finished stays failed: {exc}")
        raise self.retry(exc=exc, countdown=300)


async def _complete_finished_stays(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    today: date | None = None,
) -> int:
    """Async implementation; builds its own engine unless given a session factory."""
    if session_factory is not None:
        return await ReservationService(session_factory).complete_finished_stays(today)

    # Each task run owns an event loop, so it also owns its engine
    engine = create_engine()
    try:
        service = ReservationService(create_session_factory(engine))
        return await service.complete_finished_stays(today)
    finally:
        await engine.dispose()
