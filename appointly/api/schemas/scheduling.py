from datetime import date, datetime
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, EmailStr, Field

from appointly.models.availability import AvailabilityRulePublic
from appointly.models.reservation import ReservationCreated, ReservationPublic


class CreateRuleRequest(BaseModel):
    weekday: int = Field(ge=0, le=6)  # 0 = Sunday
    start_time: str = Field(pattern=r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")
    end_time: str = Field(pattern=r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")
    interval_minutes: int = Field(ge=15, le=480)
    timezone: str = Field(min_length=1, max_length=64)


class RuleListResponse(BaseModel):
    availability: list[AvailabilityRulePublic]
    count: int


class SlotInfo(BaseModel):
    start: datetime
    end: datetime
    start_local: str
    end_local: str
    timezone: str
    duration_minutes: int
    available: bool


class SlotsResponse(BaseModel):
    date_from: date
    date_to: date
    host_timezone: str | None = None
    slots: list[SlotInfo]
    count: int


class BookRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    slot_start: AwareDatetime  # ISO 8601 with offset
    slot_end: AwareDatetime


class BookResponse(BaseModel):
    message: str = "Booking created successfully"
    booking: ReservationCreated


class BookingListResponse(BaseModel):
    bookings: list[ReservationPublic]
    count: int


class CancelRequest(BaseModel):
    booking_id: UUID
    cancel_code: str = Field(min_length=1, max_length=32)


class CancelResponse(BaseModel):
    message: str = "Booking cancelled successfully"
    booking_id: str
    cancelled_at: datetime
