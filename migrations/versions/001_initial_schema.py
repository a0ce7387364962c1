"""Initial schema: users, availability_rules, reservations.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "availability_rules",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("interval_minutes", sa.Integer(), nullable=False),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "weekday", name="uq_availability_rules_owner_weekday"),
        sa.CheckConstraint("weekday >= 0 AND weekday <= 6", name="ck_availability_rules_weekday"),
        sa.CheckConstraint("end_time > start_time", name="ck_availability_rules_time_order"),
        sa.CheckConstraint(
            "interval_minutes >= 15 AND interval_minutes <= 480",
            name="ck_availability_rules_interval",
        ),
    )
    op.create_index(op.f("ix_availability_rules_owner_id"), "availability_rules", ["owner_id"], unique=False)

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("public_id", sa.String(length=36), nullable=False),
        sa.Column("cancel_code", sa.String(length=6), nullable=False),
        sa.Column("contact_name", sa.String(length=100), nullable=False),
        sa.Column("contact_email", sa.String(length=255), nullable=False),
        sa.Column("slot_start", sa.DateTime(), nullable=False),
        sa.Column("slot_end", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="confirmed"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("slot_end > slot_start", name="ck_reservations_time_order"),
        sa.CheckConstraint("status IN ('confirmed', 'cancelled')", name="ck_reservations_status"),
    )
    op.create_index(op.f("ix_reservations_owner_id"), "reservations", ["owner_id"], unique=False)
    op.create_index(op.f("ix_reservations_public_id"), "reservations", ["public_id"], unique=True)
    op.create_index(op.f("ix_reservations_slot_start"), "reservations", ["slot_start"], unique=False)
    op.create_index(
        "uq_reservations_owner_interval_confirmed",
        "reservations",
        ["owner_id", "slot_start", "slot_end"],
        unique=True,
        postgresql_where=sa.text("status = 'confirmed'"),
        sqlite_where=sa.text("status = 'confirmed'"),
    )


def downgrade() -> None:
    op.drop_index("uq_reservations_owner_interval_confirmed", table_name="reservations")
    op.drop_index(op.f("ix_reservations_slot_start"), table_name="reservations")
    op.drop_index(op.f("ix_reservations_public_id"), table_name="reservations")
    op.drop_index(op.f("ix_reservations_owner_id"), table_name="reservations")
    op.drop_table("reservations")
    op.drop_index(op.f("ix_availability_rules_owner_id"), table_name="availability_rules")
    op.drop_table("availability_rules")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
