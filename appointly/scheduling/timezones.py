"""
Wall-clock <-> instant conversion for IANA zones.

DST resolution is fixed here rather than left to a library default:

* ambiguous wall-clock times (fall-back) resolve to the first occurrence,
  i.e. the pre-transition offset (``fold=0``);
* non-existent wall-clock times (spring-forward gap) are read with the
  pre-transition offset, which lands them after the gap, shifted forward by
  the gap's length (02:30 on a US spring-forward day becomes 03:30 local).
"""

import re
from datetime import UTC, date, datetime, time
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from appointly.scheduling.exceptions import InvalidTimeSpec, UnknownTimezone

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"

_WALL_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")


def parse_wall_time(value: str | time) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a time of day."""
    if isinstance(value, time):
        return value.replace(tzinfo=None, microsecond=0)
    if not isinstance(value, str):
        raise InvalidTimeSpec(f"Invalid time format: {value!r}. Expected HH:MM or HH:MM:SS")
    match = _WALL_TIME_RE.match(value.strip())
    if not match:
        raise InvalidTimeSpec(f"Invalid time format: {value!r}. Expected HH:MM or HH:MM:SS")
    hour, minute, second = match.groups()
    return time(int(hour), int(minute), int(second or 0))


@lru_cache(maxsize=256)
def get_zone(zone_id: str) -> ZoneInfo:
    try:
        return ZoneInfo(zone_id)
    except (ZoneInfoNotFoundError, ValueError, TypeError, OSError) as e:
        # ValueError/OSError cover malformed keys and directories like "America"
        raise UnknownTimezone(f"Unknown timezone: {zone_id!r}") from e


def is_known_zone(zone_id: str) -> bool:
    try:
        get_zone(zone_id)
    except UnknownTimezone:
        return False
    return True


def to_instant(day: date, wall_time: str | time, zone_id: str) -> datetime:
    """Resolve a local calendar date and wall-clock time to an aware UTC instant."""
    zone = get_zone(zone_id)
    t = parse_wall_time(wall_time)
    local = datetime.combine(day, t).replace(tzinfo=zone, fold=0)
    return local.astimezone(UTC)


def to_local(instant: datetime, zone_id: str) -> datetime:
    if instant.tzinfo is None:
        raise InvalidTimeSpec("Instant must be timezone-aware")
    return instant.astimezone(get_zone(zone_id))


def format_local(instant: datetime, zone_id: str, fmt: str = DISPLAY_FORMAT) -> str:
    return to_local(instant, zone_id).strftime(fmt)


def ensure_utc(instant: datetime) -> datetime:
    """Normalise an aware datetime to UTC; naive values are rejected."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise InvalidTimeSpec("Datetime must include a UTC offset")
    return instant.astimezone(UTC)


def from_naive_utc(value: datetime) -> datetime:
    """Columns are TIMESTAMP WITHOUT TIME ZONE holding UTC; re-attach UTC on read."""
    if value.tzinfo is not None:
        return value.astimezone(UTC)
    return value.replace(tzinfo=UTC)


def to_naive_utc(value: datetime) -> datetime:
    """Convert to naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value
