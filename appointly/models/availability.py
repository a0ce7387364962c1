from datetime import datetime, time

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import Field, SQLModel

from appointly.models.base import NAIVE_UTC, utc_naive_now


class AvailabilityRule(SQLModel, table=True):
    __tablename__ = "availability_rules"
    __table_args__ = (
        UniqueConstraint("owner_id", "weekday", name="uq_availability_rules_owner_weekday"),
        CheckConstraint("weekday >= 0 AND weekday <= 6", name="ck_availability_rules_weekday"),
        CheckConstraint("end_time > start_time", name="ck_availability_rules_time_order"),
        CheckConstraint(
            "interval_minutes >= 15 AND interval_minutes <= 480",
            name="ck_availability_rules_interval",
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    weekday: int  # 0 = Sunday
    start_time: time
    end_time: time
    interval_minutes: int
    timezone: str = Field(max_length=64)
    created_at: datetime = Field(default_factory=utc_naive_now, sa_type=NAIVE_UTC)


class AvailabilityRuleCreate(SQLModel):
    weekday: int
    start_time: str | time
    end_time: str | time
    interval_minutes: int
    timezone: str


class AvailabilityRulePublic(SQLModel):
    id: int
    weekday: int
    start_time: time
    end_time: time
    interval_minutes: int
    timezone: str
    created_at: datetime
