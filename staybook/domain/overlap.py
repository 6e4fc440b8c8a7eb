"""Occupancy rules shared by the overlap index and its tests.

Ranges are half-open ``[start, end)``: a checkout on the same day as another
stay's check-in is not a conflict.
"""

from datetime import date

from staybook.core.exceptions import ValidationError
from staybook.domain.reservation_state import ReservationState

# States that occupy the calendar
ACTIVE_STATES = frozenset({ReservationState.PENDING, ReservationState.CONFIRMED})
ACTIVE_STATE_VALUES = tuple(sorted(state.value for state in ACTIVE_STATES))


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """True iff ``[start_a, end_a)`` and ``[start_b, end_b)`` share a night."""
    return start_a < end_b and start_b < end_a


def validate_stay_range(start_date: date | None, end_date: date | None) -> None:
    """Structural checks on a requested stay."""
    if start_date is None or end_date is None:
        raise ValidationError("Start and end dates are required")
    for value in (start_date, end_date):
        # datetime subclasses date; a time component is not a calendar date
        if not isinstance(value, date) or hasattr(value, "hour"):
            raise ValidationError(f"Invalid calendar date: {value!r}")
    if end_date <= start_date:
        raise ValidationError("End date must be after start date")


def validate_guest_count(guest_count: int | None) -> None:
    if guest_count is None:
        raise ValidationError("Guest count is required")
    if isinstance(guest_count, bool) or not isinstance(guest_count, int):
        raise ValidationError(f"Invalid guest count: {guest_count!r}")
    if guest_count <= 0:
        raise ValidationError("Guest count must be positive")
