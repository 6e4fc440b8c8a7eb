"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-10-01

Creates the tables the reservation core reads and writes:
- Users (identity, role, active flag)
- Accommodations (host, capacity, soft delete)
- Reservations, plus an exclusion constraint that keeps pending and
  confirmed stays of one accommodation from overlapping
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== USERS ====================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("full_name", sa.String(200)),
        sa.Column("role", sa.String(20), nullable=False, server_default="guest"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # ==================== ACCOMMODATIONS ====================
    op.create_table(
        "accommodations",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("host_id", sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("capacity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # ==================== RESERVATIONS ====================
    op.create_table(
        "reservations",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("accommodation_id", sa.Uuid, sa.ForeignKey("accommodations.id"), nullable=False, index=True),
        sa.Column("guest_id", sa.Uuid, sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("start_date", sa.Date, nullable=False, index=True),
        sa.Column("end_date", sa.Date, nullable=False, index=True),
        sa.Column("guest_count", sa.Integer, nullable=False),
        sa.Column("state", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("rejection_reason", sa.Text),
        sa.Column("cancelled_by", sa.String(10)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
        sa.Column("rejected_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("end_date > start_date", name="ck_reservations_date_order"),
        sa.CheckConstraint("guest_count > 0", name="ck_reservations_guest_count"),
    )
    op.create_index(
        "ix_reservations_accommodation_state", "reservations", ["accommodation_id", "state"]
    )

    # Store-level backstop for the application overlap check. daterange '[)'
    # matches the half-open semantics: checkout == next check-in is allowed.
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        """
        ALTER TABLE reservations
        ADD CONSTRAINT no_active_reservation_overlap
        EXCLUDE USING gist (
            accommodation_id WITH =,
            daterange(start_date, end_date, '[)') WITH &&
        )
        WHERE (state IN ('pending', 'confirmed'))
        """
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.execute("ALTER TABLE reservations DROP CONSTRAINT IF EXISTS no_active_reservation_overlap")
    op.drop_index("ix_reservations_accommodation_state", table_name="reservations")
    op.drop_table("reservations")
    op.drop_table("accommodations")
    op.drop_table("users")
