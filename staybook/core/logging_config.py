"""Logging setup."""

import logging

from staybook.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process or Celery worker."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )
    # SQL echo is controlled by settings.debug on the engine, keep the logger quiet
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
