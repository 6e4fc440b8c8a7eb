"""Accommodation (listing) model."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staybook.database import Base

if TYPE_CHECKING:
    from staybook.models.reservation import Reservation
    from staybook.models.user import User


class Accommodation(Base):
    """Bookable listing owned by exactly one host."""

    __tablename__ = "accommodations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    host_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Soft delete: hidden from booking, kept for history
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    # Relationships
    host: Mapped["User"] = relationship("User", back_populates="accommodations")
    reservations: Mapped[list["Reservation"]] = relationship(
        "Reservation", back_populates="accommodation"
    )
