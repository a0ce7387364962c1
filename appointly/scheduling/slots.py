"""
Slot generation from weekly availability rules.

Pure domain logic: no database, no clock, no I/O. The same rules,
reservations, ``now`` and date range always yield the same slots.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Protocol

from appointly.scheduling.policy import meets_lead_time, validate_date_range, within_booking_horizon
from appointly.scheduling.timezones import format_local, to_instant


class WeeklyRule(Protocol):
    """Shape of an availability rule as the generator reads it."""

    weekday: int
    start_time: time
    end_time: time
    interval_minutes: int
    timezone: str


@dataclass(frozen=True)
class Interval:
    """
    Half-open interval ``[start, end)`` between two aware instants.

    Invariant: start must be before end.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def overlaps(self, other: "Interval") -> bool:
        # touching endpoints do not overlap
        return self.start < other.end and self.end > other.start

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


@dataclass(frozen=True)
class CandidateSlot:
    start: datetime
    end: datetime
    available: bool
    timezone: str
    start_local: str
    end_local: str

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


def weekday_index(d: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return d.isoweekday() % 7


def date_range(from_date: date, to_date: date) -> list[date]:
    days = (to_date - from_date).days
    return [from_date + timedelta(days=i) for i in range(days + 1)]


def overlaps_any(interval: Interval, busy: Iterable[Interval]) -> bool:
    return any(interval.overlaps(b) for b in busy)


def reference_timezone(rules: Sequence[WeeklyRule]) -> str | None:
    """The owner's display zone: the first rule's zone, in the order given.

    Rules with other zones are still expanded in their own zone; only the
    rendering uses this one.
    """
    return rules[0].timezone if rules else None


def expand_rule(rule: WeeklyRule, day: date) -> list[Interval]:
    """Cut one rule into back-to-back intervals on ``day``.

    A chunk that would run past the rule's end is dropped, never truncated.
    """
    window_start = to_instant(day, rule.start_time, rule.timezone)
    window_end = to_instant(day, rule.end_time, rule.timezone)
    step = timedelta(minutes=rule.interval_minutes)

    intervals: list[Interval] = []
    cursor = window_start
    while cursor + step <= window_end:
        intervals.append(Interval(start=cursor, end=cursor + step))
        cursor += step
    return intervals


def generate_slots_for_date(
    day: date,
    rules: Sequence[WeeklyRule],
    reservations: Sequence[Interval],
    now: datetime,
    display_zone: str,
) -> list[CandidateSlot]:
    slots: list[CandidateSlot] = []
    weekday = weekday_index(day)
    for rule in rules:
        if rule.weekday != weekday:
            continue
        for interval in expand_rule(rule, day):
            available = (
                meets_lead_time(interval.start, now)
                and within_booking_horizon(interval.start, now)
                and not overlaps_any(interval, reservations)
            )
            slots.append(
                CandidateSlot(
                    start=interval.start,
                    end=interval.end,
                    available=available,
                    timezone=display_zone,
                    start_local=format_local(interval.start, display_zone),
                    end_local=format_local(interval.end, display_zone),
                )
            )
    return slots


def generate_slots(
    from_date: date,
    to_date: date,
    rules: Sequence[WeeklyRule],
    reservations: Sequence[Interval],
    now: datetime,
) -> list[CandidateSlot]:
    """
    Expand ``rules`` over every date in ``[from_date, to_date]``.

    Args:
        from_date: First calendar date, inclusive
        to_date: Last calendar date, inclusive (at most 14 days after from_date)
        rules: Availability rules of one owner; the first one sets the display zone
        reservations: Confirmed reservations of that owner
        now: Evaluation instant for the lead-time and horizon checks

    Returns:
        All slots, available and busy, sorted by start instant

    Raises:
        InvalidDateRange: If from_date is after to_date
        DateRangeTooWide: If the range spans more than 14 days
    """
    validate_date_range(from_date, to_date)
    display_zone = reference_timezone(rules)
    if display_zone is None:
        return []

    slots: list[CandidateSlot] = []
    for day in date_range(from_date, to_date):
        slots.extend(generate_slots_for_date(day, rules, reservations, now, display_zone))

    # stable sort: equal starts keep rule order
    return sorted(slots, key=lambda s: s.start)
