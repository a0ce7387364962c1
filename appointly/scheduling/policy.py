"""
Booking time rules.

All predicates are pure: they take the evaluation instant ``now`` explicitly
and compare with strict inequalities. The thresholds are business rules, not
settings.
"""

from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

from appointly.scheduling.exceptions import (
    DateRangeTooWide,
    DurationOutOfBounds,
    HorizonExceeded,
    InvalidDateRange,
    LeadTimeTooShort,
)

LEAD_TIME = timedelta(hours=2)
BOOKING_HORIZON = timedelta(days=14)
CANCELLATION_NOTICE = timedelta(hours=12)
MIN_DURATION = timedelta(minutes=15)
MAX_DURATION = timedelta(minutes=480)
MAX_QUERY_RANGE = timedelta(days=14)

# Returns the current instant as an aware UTC datetime.
Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now(UTC)


def meets_lead_time(start: datetime, now: datetime) -> bool:
    return start > now + LEAD_TIME


def within_booking_horizon(start: datetime, now: datetime) -> bool:
    return start < now + BOOKING_HORIZON


def meets_cancellation_notice(start: datetime, now: datetime) -> bool:
    return start > now + CANCELLATION_NOTICE


def valid_duration(start: datetime, end: datetime) -> bool:
    if end <= start:
        return False
    return MIN_DURATION <= end - start <= MAX_DURATION


def validate_booking_window(start: datetime, end: datetime, now: datetime) -> None:
    """Raise the first violated booking rule, checked in a fixed order."""
    if not valid_duration(start, end):
        if end <= start:
            raise DurationOutOfBounds("Slot end time must be after start time")
        raise DurationOutOfBounds()
    if not meets_lead_time(start, now):
        raise LeadTimeTooShort()
    if not within_booking_horizon(start, now):
        raise HorizonExceeded()


def validate_date_range(from_date: date, to_date: date) -> None:
    if from_date > to_date:
        raise InvalidDateRange()
    if to_date - from_date > MAX_QUERY_RANGE:
        raise DateRangeTooWide()
