from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from fastcal.core import events
from fastcal.core.config import Location
from fastcal.core.result import NoSolution
from fastcal.core.timeutil import format_local_time, local_noon_utc

MECCA = Location(latitude=21.4225, longitude=39.8262)
TROMSO = Location(latitude=69.6492, longitude=18.9553)


def test_mecca_dawn_and_sunset():
    noon = local_noon_utc(date(2024, 3, 1), 180)
    dawn = events.dawn(noon, MECCA, 180, 18.5)
    sunset = events.sunset(noon, MECCA, 180)
    assert format_local_time(dawn, 180) in ("05:23", "05:24", "05:25")
    assert format_local_time(sunset, 180) in ("18:23", "18:24", "18:25")


def test_event_order_for_one_day():
    noon = local_noon_utc(date(2024, 3, 1), 180)
    dawn = events.dawn(noon, MECCA, 180)
    rise = events.sunrise(noon, MECCA, 180)
    transit = events.solar_transit(noon, MECCA, 180)
    sset = events.sunset(noon, MECCA, 180)
    nightfall = events.twilight_end(noon, MECCA, 180)
    assert dawn < rise < transit < sset < nightfall


def test_sunrise_and_sunset_are_symmetric_about_transit():
    noon = local_noon_utc(date(2024, 6, 1), 120)
    loc = Location(latitude=48.85, longitude=2.35)
    rise = events.sunrise(noon, loc, 120)
    sset = events.sunset(noon, loc, 120)
    transit = events.solar_transit(noon, loc, 120)
    mid = rise + (sset - rise) / 2
    assert abs((mid - transit).total_seconds()) < 1.0


def test_transit_near_local_noon_on_reference_meridian():
    # longitude 0, UTC: transit = 12:00 - EoT (within ~16 min)
    noon = local_noon_utc(date(2024, 11, 3), 0)
    transit = events.solar_transit(noon, Location(0.0, 0.0), 0)
    assert transit.hour == 11
    assert 43 <= transit.minute <= 45


def test_timezone_offset_shifts_reference_not_instant():
    # the same physical event regardless of the clock convention
    loc = Location(latitude=40.0, longitude=30.0)
    a = events.sunset(local_noon_utc(date(2024, 3, 1), 120), loc, 120)
    b = events.sunset(local_noon_utc(date(2024, 3, 1), 180), loc, 180)
    assert abs((a - b).total_seconds()) < 15.0


def test_time_for_angle_branches():
    noon = local_noon_utc(date(2024, 3, 1), 0)
    loc = Location(latitude=51.5, longitude=0.0)
    morning = events.time_for_angle(noon, loc, 0, -6.0, "morning")
    evening = events.time_for_angle(noon, loc, 0, -6.0, "evening")
    assert morning < evening
    assert morning.tzinfo is not None


def test_time_for_angle_rejects_unknown_branch():
    noon = local_noon_utc(date(2024, 3, 1), 0)
    with pytest.raises(ValueError):
        events.time_for_angle(noon, MECCA, 0, -0.833, "noon")


def test_time_for_angle_rejects_naive_reference():
    with pytest.raises(ValueError):
        events.sunrise(datetime(2024, 3, 1, 12), MECCA, 0)


def test_midnight_sun_has_no_sunset_but_has_transit():
    noon = local_noon_utc(date(2024, 6, 21), 120)
    assert isinstance(events.sunset(noon, TROMSO, 120), NoSolution)
    assert isinstance(events.sunrise(noon, TROMSO, 120), NoSolution)
    assert isinstance(events.dawn(noon, TROMSO, 120), NoSolution)
    transit = events.solar_transit(noon, TROMSO, 120)
    assert transit - noon < timedelta(hours=1)


def test_twilight_unreachable_while_sun_still_sets():
    noon = local_noon_utc(date(2024, 5, 1), 120)
    assert isinstance(events.dawn(noon, TROMSO, 120, 18.0), NoSolution)
    assert isinstance(events.sunrise(noon, TROMSO, 120), datetime)
    assert isinstance(events.sunset(noon, TROMSO, 120), datetime)
