"""Cancellation window for confirmed reservations.

A confirmed stay may be cancelled by its guest only while more than the
notice window (48 hours by default) remains before check-in. Check-in is
taken as 00:00 UTC of the start date. Administrators are exempt; that
exemption is applied by the state machine, not here.
"""

from datetime import UTC, date, datetime, time, timedelta

from staybook.core.exceptions import InvalidStateError

DEFAULT_NOTICE_HOURS = 48


def check_in_moment(start_date: date) -> datetime:
    """Instant the stay begins."""
    return datetime.combine(start_date, time.min, tzinfo=UTC)


def hours_until_check_in(start_date: date, now: datetime) -> float:
    """Hours left before check-in; negative once the stay has begun.

    Naive ``now`` values are treated as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return (check_in_moment(start_date) - now) / timedelta(hours=1)


def can_cancel_confirmed(
    start_date: date,
    now: datetime,
    notice_hours: int = DEFAULT_NOTICE_HOURS,
) -> bool:
    """True while strictly more than ``notice_hours`` remain before check-in."""
    return hours_until_check_in(start_date, now) > notice_hours


def assert_cancellation_window(
    start_date: date,
    now: datetime,
    notice_hours: int = DEFAULT_NOTICE_HOURS,
) -> None:
    if not can_cancel_confirmed(start_date, now, notice_hours):
        raise InvalidStateError(
            f"Confirmed reservations can only be cancelled more than "
            f"{notice_hours} hours before check-in"
        )
