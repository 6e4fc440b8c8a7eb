"""Role-based access control for reservations.

Authorization is decided from the tuple
``(principal role, principal id, reservation guest id, accommodation host id)``
rather than from behaviour attached to role types.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class UserRole(str, Enum):
    """User roles in the system."""

    GUEST = "guest"
    HOST = "host"
    ADMIN = "admin"


class Actor(str, Enum):
    """Relationship of a principal to a specific reservation."""

    GUEST_OWNER = "guest_owner"
    HOST_OWNER = "host_owner"
    ADMIN = "admin"
    SYSTEM = "system"  # time-based jobs, never an HTTP caller
    STRANGER = "stranger"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a lifecycle operation."""

    id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def classify_actor(principal: Principal, guest_id: UUID, host_id: UUID | None) -> Actor:
    """Work out how ``principal`` relates to a reservation.

    Administrators are classified as such even when they also own the guest
    or host side, so their override authority always applies.
    """
    if principal.role == UserRole.ADMIN:
        return Actor.ADMIN
    if principal.role == UserRole.HOST and host_id is not None and principal.id == host_id:
        return Actor.HOST_OWNER
    if principal.id == guest_id:
        return Actor.GUEST_OWNER
    return Actor.STRANGER


def can_act_for_guest(principal: Principal, guest_id: UUID) -> bool:
    """True when the principal may create or edit bookings held by ``guest_id``."""
    return principal.is_admin or principal.id == guest_id
