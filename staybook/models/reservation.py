"""Reservation model."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staybook.database import Base

if TYPE_CHECKING:
    from staybook.models.accommodation import Accommodation
    from staybook.models.user import User


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Reservation(Base):
    """A guest's booking of an accommodation for a half-open date range."""

    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_reservations_date_order"),
        CheckConstraint("guest_count > 0", name="ck_reservations_guest_count"),
        Index("ix_reservations_accommodation_state", "accommodation_id", "state"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    accommodation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accommodations.id"), nullable=False, index=True
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )

    # Stay
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    guest_count: Mapped[int] = mapped_column(Integer, nullable=False)

    # Status
    state: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )  # pending, confirmed, rejected, cancelled, completed
    rejection_reason: Mapped[str | None] = mapped_column(Text)
    cancelled_by: Mapped[str | None] = mapped_column(String(10))  # guest, admin

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    accommodation: Mapped["Accommodation"] = relationship(
        "Accommodation", back_populates="reservations"
    )
    guest: Mapped["User"] = relationship("User", back_populates="reservations")

    @property
    def nights(self) -> int:
        """Number of nights in the stay."""
        return (self.end_date - self.start_date).days
