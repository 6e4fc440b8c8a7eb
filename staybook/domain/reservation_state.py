"""Reservation state machine.

The transition table is the single source of truth for which states follow
which, who may trigger each move and which extra condition applies.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from staybook.core.exceptions import (
    ForbiddenError,
    IllegalTransitionError,
    InvalidStateError,
    ValidationError,
)
from staybook.core.permissions import Actor
from staybook.domain.cancellation_policy import DEFAULT_NOTICE_HOURS, assert_cancellation_window


class ReservationState(str, Enum):
    """Reservation states."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TransitionRule:
    """Who may perform a transition and what must hold for it."""

    allowed: frozenset[Actor]
    forbidden_message: str = "You don't have permission to change this reservation"
    requires_reason: bool = False
    notice_required: bool = False  # cancellation window, administrators exempt
    requires_stay_ended: bool = False


_HOST_SIDE = frozenset({Actor.HOST_OWNER, Actor.ADMIN})
_GUEST_SIDE = frozenset({Actor.GUEST_OWNER, Actor.ADMIN})
_HOST_REQUIRED = "administrator or host required"
_OWNER_REQUIRED = "only the guest who made the reservation or an administrator can cancel it"

RESERVATION_TRANSITIONS: dict[ReservationState, dict[ReservationState, TransitionRule]] = {
    ReservationState.PENDING: {
        ReservationState.CONFIRMED: TransitionRule(_HOST_SIDE, _HOST_REQUIRED),
        ReservationState.REJECTED: TransitionRule(_HOST_SIDE, _HOST_REQUIRED, requires_reason=True),
        ReservationState.CANCELLED: TransitionRule(_GUEST_SIDE, _OWNER_REQUIRED),
    },
    ReservationState.CONFIRMED: {
        ReservationState.CANCELLED: TransitionRule(_GUEST_SIDE, _OWNER_REQUIRED, notice_required=True),
        ReservationState.COMPLETED: TransitionRule(frozenset({Actor.SYSTEM}), requires_stay_ended=True),
    },
    ReservationState.REJECTED: {},
    ReservationState.CANCELLED: {},
    ReservationState.COMPLETED: {},
}


def parse_state(value: str | ReservationState) -> ReservationState:
    """Coerce a stored or requested state name, rejecting unknown names."""
    if isinstance(value, ReservationState):
        return value
    try:
        return ReservationState(str(value).lower())
    except ValueError:
        raise ValidationError(f"Unknown reservation state '{value}'")


def assert_reservation_transition(
    current: str | ReservationState,
    target: str | ReservationState,
    actor: Actor,
    *,
    reason: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    now: datetime | None = None,
    notice_hours: int = DEFAULT_NOTICE_HOURS,
) -> TransitionRule:
    """Validate a transition for ``actor``; raise the matching typed error.

    Checks run in a fixed order: the edge must exist, the actor must be
    allowed, then the edge's own condition must hold. The same call against
    the same record therefore always fails the same way.
    """
    current_state = parse_state(current)
    target_state = parse_state(target)

    rule = RESERVATION_TRANSITIONS[current_state].get(target_state)
    if rule is None:
        raise IllegalTransitionError(current_state.value, target_state.value)

    if actor not in rule.allowed:
        if rule.allowed == {Actor.SYSTEM}:
            # Completion belongs to the scheduled job, not to any caller
            raise IllegalTransitionError(current_state.value, target_state.value)
        raise ForbiddenError(rule.forbidden_message)

    if rule.requires_reason and not (reason and reason.strip()):
        raise ValidationError("A rejection reason is required")

    if rule.notice_required and actor != Actor.ADMIN:
        if start_date is None or now is None:
            raise ValueError("start_date and now are required to check the cancellation window")
        assert_cancellation_window(start_date, now, notice_hours)

    if rule.requires_stay_ended:
        if end_date is None or now is None:
            raise ValueError("end_date and now are required to complete a stay")
        # [start, end): the last night is the one before end_date, so the stay
        # has passed once the UTC day reaches end_date
        if end_date > now.date():
            raise InvalidStateError("Cannot complete a stay that has not ended yet")

    return rule
