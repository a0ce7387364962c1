import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, Index, text
from sqlmodel import Field, SQLModel

from appointly.models.base import NAIVE_UTC, utc_naive_now


class ReservationStatus(str, enum.Enum):
    confirmed = "confirmed"
    cancelled = "cancelled"


class Reservation(SQLModel, table=True):
    """A committed booking. Rows are never deleted; cancel flips ``status``."""

    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("slot_end > slot_start", name="ck_reservations_time_order"),
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="ck_reservations_status"),
        # backstop for the per-owner lock: one confirmed row per exact interval
        Index(
            "uq_reservations_owner_interval_confirmed",
            "owner_id",
            "slot_start",
            "slot_end",
            unique=True,
            postgresql_where=text("status = 'confirmed'"),
            sqlite_where=text("status = 'confirmed'"),
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    public_id: str = Field(unique=True, index=True, max_length=36)
    cancel_code: str = Field(max_length=6)
    contact_name: str = Field(max_length=100)
    contact_email: str = Field(max_length=255)
    slot_start: datetime = Field(index=True, sa_type=NAIVE_UTC)
    slot_end: datetime = Field(sa_type=NAIVE_UTC)
    status: str = Field(default=ReservationStatus.confirmed.value, max_length=20)
    created_at: datetime = Field(default_factory=utc_naive_now, sa_type=NAIVE_UTC)


class ContactInfo(SQLModel):
    name: str
    email: str


class ReservationPublic(SQLModel):
    public_id: str
    contact_name: str
    contact_email: str
    slot_start: datetime
    slot_end: datetime
    status: str
    created_at: datetime


class ReservationCreated(ReservationPublic):
    """Returned once, to the booker; the only place the cancel code is shown."""

    cancel_code: str
