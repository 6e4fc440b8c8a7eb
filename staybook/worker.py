"""Celery worker configuration.

Runs the time-based side of the reservation lifecycle: confirmed stays whose
end date has passed are moved to completed once a day.
"""

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from staybook.config import settings
from staybook.core.logging_config import configure_logging

# Create Celery app
celery_app = Celery(
    "staybook_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["staybook.tasks"],
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=300,  # 5 minutes max
    task_soft_time_limit=240,

    # Worker settings
    worker_prefetch_multiplier=1,

    # Result backend settings
    result_expires=3600,

    # Retry settings
    task_default_retry_delay=60,

    beat_schedule={
        "complete-finished-stays": {
            "task": "staybook.tasks.complete_finished_stays",
            "schedule": crontab(hour=settings.completion_job_hour, minute=0),
        },
    },
)


@setup_logging.connect
def _configure_worker_logging(**kwargs) -> None:
    configure_logging()


if __name__ == "__main__":
    celery_app.start()
