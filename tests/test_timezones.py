"""
Tests for wall-clock <-> instant conversion, including DST transitions.
"""

from datetime import UTC, date, datetime, time

import pytest

from appointly.scheduling.exceptions import InvalidTimeSpec, UnknownTimezone
from appointly.scheduling.timezones import (
    ensure_utc,
    format_local,
    from_naive_utc,
    get_zone,
    is_known_zone,
    parse_wall_time,
    to_instant,
    to_local,
    to_naive_utc,
)


class TestParseWallTime:

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("09:00", time(9, 0)),
            ("9:05", time(9, 5)),
            ("23:59", time(23, 59)),
            ("17:30:15", time(17, 30, 15)),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_wall_time(text) == expected

    @pytest.mark.parametrize("text", ["24:00", "12:60", "noon", "", "12", "12:00:00:00", "-1:00"])
    def test_invalid(self, text):
        with pytest.raises(InvalidTimeSpec):
            parse_wall_time(text)

    def test_time_passes_through(self):
        assert parse_wall_time(time(8, 15)) == time(8, 15)


class TestZones:

    def test_known(self):
        assert get_zone("America/New_York").key == "America/New_York"
        assert is_known_zone("Europe/Berlin")

    @pytest.mark.parametrize("zone_id", ["Mars/Olympus_Mons", "", "America", "../etc/passwd"])
    def test_unknown(self, zone_id):
        with pytest.raises(UnknownTimezone):
            get_zone(zone_id)
        assert not is_known_zone(zone_id)


class TestToInstant:

    def test_summer_offset(self):
        # EDT is UTC-4
        assert to_instant(date(2026, 6, 15), "09:00", "America/New_York") == datetime(2026, 6, 15, 13, 0, tzinfo=UTC)

    def test_winter_offset(self):
        # EST is UTC-5
        assert to_instant(date(2026, 1, 12), "09:00", "America/New_York") == datetime(2026, 1, 12, 14, 0, tzinfo=UTC)

    def test_spring_forward_gap_shifts_forward(self):
        # 02:30 does not exist on 2026-03-08 in New York; read with the EST offset
        instant = to_instant(date(2026, 3, 8), "02:30", "America/New_York")
        assert instant == datetime(2026, 3, 8, 7, 30, tzinfo=UTC)
        assert format_local(instant, "America/New_York") == "2026-03-08 03:30:00"

    def test_fall_back_ambiguity_takes_first_occurrence(self):
        # 01:30 happens twice on 2026-11-01; the first one is still EDT
        instant = to_instant(date(2026, 11, 1), "01:30", "America/New_York")
        assert instant == datetime(2026, 11, 1, 5, 30, tzinfo=UTC)

    def test_unknown_zone(self):
        with pytest.raises(UnknownTimezone):
            to_instant(date(2026, 6, 15), "09:00", "Nowhere/Special")

    def test_bad_time(self):
        with pytest.raises(InvalidTimeSpec):
            to_instant(date(2026, 6, 15), "9am", "UTC")


class TestLocalRendering:

    def test_round_trip_display(self):
        instant = datetime(2026, 6, 15, 13, 0, tzinfo=UTC)
        assert format_local(instant, "America/New_York") == "2026-06-15 09:00:00"
        assert to_local(instant, "Asia/Tokyo").hour == 22

    def test_naive_instant_rejected(self):
        with pytest.raises(InvalidTimeSpec):
            to_local(datetime(2026, 6, 15, 13, 0), "UTC")


class TestUtcNormalisation:

    def test_ensure_utc_converts_offsets(self):
        berlin = datetime(2026, 6, 15, 15, 0, tzinfo=get_zone("Europe/Berlin"))
        assert ensure_utc(berlin) == datetime(2026, 6, 15, 13, 0, tzinfo=UTC)
        assert ensure_utc(berlin).tzinfo is UTC

    def test_ensure_utc_rejects_naive(self):
        with pytest.raises(InvalidTimeSpec):
            ensure_utc(datetime(2026, 6, 15, 13, 0))

    def test_naive_storage_helpers(self):
        aware = datetime(2026, 6, 15, 13, 0, tzinfo=UTC)
        naive = to_naive_utc(aware)
        assert naive.tzinfo is None
        assert from_naive_utc(naive) == aware
