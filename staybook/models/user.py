"""User account model."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staybook.database import Base

if TYPE_CHECKING:
    from staybook.models.accommodation import Accommodation
    from staybook.models.reservation import Reservation


class User(Base):
    """Account as seen by the reservation core: identity, role, active flag."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(String(200))
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="guest"
    )  # guest, host, admin
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    # Relationships
    accommodations: Mapped[list["Accommodation"]] = relationship(
        "Accommodation", back_populates="host"
    )
    reservations: Mapped[list["Reservation"]] = relationship(
        "Reservation", back_populates="guest"
    )
